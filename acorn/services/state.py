"""Deployment progress per resource kind."""
import logging
from enum import Enum
from typing import Dict

from ..constants import AzureResourceType

logger = logging.getLogger(__name__)


class DeploymentStage(str, Enum):
    NOT_STARTED = "NotStarted"
    SUBSCRIPTION_RESOLVED = "SubscriptionResolved"
    NAME_VALIDATED = "NameValidated"
    CREATED = "Created"
    CONFIGURED = "Configured"
    FAILED = "Failed"


# FAILED is reachable from every stage and handled separately
TRANSITIONS = {
    DeploymentStage.NOT_STARTED: {DeploymentStage.SUBSCRIPTION_RESOLVED},
    DeploymentStage.SUBSCRIPTION_RESOLVED: {DeploymentStage.NAME_VALIDATED},
    DeploymentStage.NAME_VALIDATED: {DeploymentStage.CREATED},
    DeploymentStage.CREATED: {DeploymentStage.CONFIGURED},
    DeploymentStage.CONFIGURED: set(),
    DeploymentStage.FAILED: set(),
}


class DeploymentTracker:
    """Records how far each resource kind's deployment got."""

    def __init__(self):
        self._stages: Dict[AzureResourceType, DeploymentStage] = {}

    def stage(self, kind: AzureResourceType) -> DeploymentStage:
        return self._stages.get(kind, DeploymentStage.NOT_STARTED)

    def reset(self, kind: AzureResourceType) -> None:
        self._stages.pop(kind, None)

    def advance(self, kind: AzureResourceType, stage: DeploymentStage) -> None:
        """Move a kind to its next stage.

        Raises:
            ValueError: If the transition is not allowed from the current stage.
        """
        current = self.stage(kind)
        if stage == DeploymentStage.FAILED:
            self.fail(kind)
            return
        if stage not in TRANSITIONS[current]:
            raise ValueError(f"Cannot move {kind.value} deployment from {current.value} to {stage.value}")
        self._stages[kind] = stage
        logger.debug("%s deployment: %s -> %s", kind.value, current.value, stage.value)

    def fail(self, kind: AzureResourceType) -> None:
        logger.debug("%s deployment failed at %s", kind.value, self.stage(kind).value)
        self._stages[kind] = DeploymentStage.FAILED

    def summary(self) -> Dict[str, str]:
        return {kind.value: stage.value for kind, stage in self._stages.items()}
