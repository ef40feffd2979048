"""Derive provider-legal resource names from a project name."""
import getpass
import re
from typing import Optional

from ..constants import AzureResourceType
from .validator import NAME_RULES, NameRule

FALLBACK_NAME = "acorn"


def _local_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        # No passwd entry or login name in some containers
        return ""


def _normalize(raw_name: str, rule: NameRule) -> str:
    sep = rule.separator
    name = re.sub(r"[\s_.]+", sep, raw_name.lower())
    name = re.sub(f"[^{rule.allowed}]", "", name)
    if sep:
        name = re.sub(f"{re.escape(sep)}{{2,}}", sep, name).strip(sep)
    return name.strip("-._()")


class NameGenerator:
    """Deterministic name generation. Does not check live availability."""

    @staticmethod
    def generate_name(raw_name: str, rule: NameRule, suffix: Optional[str] = None) -> str:
        """Normalize a free-form name to satisfy a rule.

        Args:
            raw_name: Human readable name (e.g. a project name).
            rule: Target naming rule.
            suffix: Optional token appended after a separator. Kept intact when
                the name has to be truncated.

        Returns:
            str: A name that passes the rule's format check.
        """
        sep = rule.separator
        name = _normalize(raw_name, rule) or FALLBACK_NAME

        tail = _normalize(suffix, rule) if suffix else ""
        if tail:
            tail = f"{sep}{tail}"[: rule.max_length - 1].rstrip(sep)

        name = name[: rule.max_length - len(tail)]
        if sep:
            name = name.rstrip(sep)
        name = f"{name}{tail}"

        if len(name) < rule.min_length:
            name += "0" * (rule.min_length - len(name))
        return name

    @staticmethod
    def generate_valid_name(project_name: str, kind: AzureResourceType, user: Optional[str] = None) -> str:
        """Generate a name for a resource kind from a project name.

        The local user name is appended to keep names of different developers
        using the same project name apart.
        """
        if user is None:
            user = _local_user()
        return NameGenerator.generate_name(project_name, NAME_RULES[kind], suffix=user or None)
