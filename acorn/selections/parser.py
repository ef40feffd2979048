"""YAML selections parser."""
import yaml

from .schema import DeploymentPayload


class SelectionsParser:
    """Parser for YAML deployment selections."""

    @staticmethod
    def load(file_path: str) -> DeploymentPayload:
        """Load and validate a YAML selections file.

        Args:
            file_path: Path to the YAML selections file.

        Returns:
            DeploymentPayload: Validated selections.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            pydantic.ValidationError: If the selections are invalid.
            yaml.YAMLError: If the YAML is malformed.
        """
        with open(file_path, 'r') as f:
            data = yaml.safe_load(f)
        return DeploymentPayload.model_validate(data)
