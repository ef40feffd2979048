"""Orchestrator configuration loaded from YAML."""
import os
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from .constants import AzureLocation
from .errors import ConfigError

CONFIG_ENV_VAR = "ACORN_CONFIG"
DEFAULT_CONFIG_FILE = "acorn.yaml"

# Microsoft Learn sandbox tenant
MICROSOFT_LEARN_TENANTS = ["604c1504-c6a3-4080-81aa-b33091104187"]


class AcornSettings(BaseModel):
    """Runtime settings for the orchestrator."""
    default_location: str = Field(default=AzureLocation.CENTRAL_US, alias="defaultLocation")
    microsoft_learn_tenants: List[str] = Field(
        default_factory=lambda: list(MICROSOFT_LEARN_TENANTS),
        alias="microsoftLearnTenants",
    )
    arm_templates_dir: str = Field(default="arm-templates", alias="armTemplatesDir")
    auth_record_path: Path = Field(
        default_factory=lambda: Path.home() / ".acorn" / "auth_record.json",
        alias="authRecordPath",
    )
    allow_unencrypted_token_cache: bool = Field(default=False, alias="allowUnencryptedTokenCache")
    env_file_name: str = Field(default=".env", alias="envFileName")

    model_config = {"populate_by_name": True}


def load_settings(path: Optional[str] = None) -> AcornSettings:
    """Load settings from a YAML file.

    Args:
        path: Explicit path to the config file. Falls back to $ACORN_CONFIG,
            then to acorn.yaml in the working directory.

    Returns:
        AcornSettings: Loaded settings, or defaults when no file exists.

    Raises:
        ConfigError: If the file is not valid YAML or fails validation.
    """
    config_path = Path(path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_FILE)
    if not config_path.exists():
        if path:
            raise ConfigError(f"Config file not found: {config_path}")
        return AcornSettings()

    try:
        with open(config_path, 'r') as f:
            data = yaml.safe_load(f) or {}
        return AcornSettings.model_validate(data)
    except (yaml.YAMLError, PydanticValidationError) as e:
        raise ConfigError(f"Invalid config file {config_path}: {e}") from e
