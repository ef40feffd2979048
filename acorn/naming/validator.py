"""Local name rules for Azure resource kinds."""
import re
from dataclasses import dataclass
from typing import Iterable, Optional

from ..constants import AzureResourceType, Errors


@dataclass(frozen=True)
class NameRule:
    """Length and character constraints for one kind of resource name."""
    min_length: int
    max_length: int
    allowed: str
    description: str
    separator: str = "-"
    alphanumeric_edges: bool = True


NAME_RULES = {
    AzureResourceType.APP_SERVICE: NameRule(2, 60, "a-zA-Z0-9-", "letters, numbers and hyphens"),
    AzureResourceType.FUNCTIONS: NameRule(2, 60, "a-zA-Z0-9-", "letters, numbers and hyphens"),
    AzureResourceType.COSMOS: NameRule(3, 44, "a-z0-9-", "lowercase letters, numbers and hyphens"),
    AzureResourceType.RESOURCE_GROUP: NameRule(
        1, 90, r"a-zA-Z0-9._()\-", "letters, numbers, periods, underscores, parentheses and hyphens",
        alphanumeric_edges=False,
    ),
}

APP_SERVICE_PLAN_RULE = NameRule(1, 40, "a-zA-Z0-9-", "letters, numbers and hyphens")
STORAGE_ACCOUNT_RULE = NameRule(3, 24, "a-z0-9", "lowercase letters and numbers", separator="")

FUNCTION_NAME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9_-]{0,127}$")


@dataclass
class AppNameValidationResult:
    """Outcome of a local (offline) name check."""
    is_valid: bool
    message: str = ""


@dataclass
class NameValidationResult:
    """Outcome of a live availability check."""
    available: bool
    reason: Optional[str] = None


def is_name_available(invalid_reason: Optional[str]) -> bool:
    """Map a provider's invalid reason to availability.

    None and the empty string both mean the name is available.
    """
    return not invalid_reason


class NameValidator:
    """Offline name checks run before calling Azure."""

    @staticmethod
    def check_name_format(name: str, rule: NameRule) -> Optional[str]:
        """Check a name against a rule.

        Returns:
            Optional[str]: The reason the name is invalid, or None if it is well formed.
        """
        if not name:
            return Errors.EMPTY_NAME
        if len(name) < rule.min_length:
            return Errors.NAME_TOO_SHORT.format(rule.min_length)
        if len(name) > rule.max_length:
            return Errors.NAME_TOO_LONG.format(rule.max_length)
        if not re.fullmatch(f"[{rule.allowed}]+", name):
            return Errors.NAME_INVALID_CHARACTERS.format(rule.description)
        if rule.alphanumeric_edges and not (name[0].isalnum() and name[-1].isalnum()):
            return Errors.NAME_INVALID_EDGES
        return None

    @staticmethod
    def check_name_for_kind(name: str, kind: AzureResourceType) -> Optional[str]:
        return NameValidator.check_name_format(name, NAME_RULES[kind])

    @staticmethod
    def validate_function_names(function_names: Iterable[str]) -> AppNameValidationResult:
        """Validate the function names of a function app.

        Names must start with a letter, contain only letters, numbers, '-' and '_',
        and be unique regardless of case.
        """
        seen = set()
        for name in function_names:
            if not FUNCTION_NAME_PATTERN.match(name or ""):
                return AppNameValidationResult(False, Errors.FUNCTION_NAME_INVALID.format(name))
            if name.lower() in seen:
                return AppNameValidationResult(False, Errors.FUNCTION_NAMES_DUPLICATE.format(name))
            seen.add(name.lower())
        return AppNameValidationResult(True)
