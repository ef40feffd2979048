"""Tests for deployment stage tracking."""
import pytest

from acorn.constants import AzureResourceType
from acorn.services.state import DeploymentStage, DeploymentTracker


def test_stages_advance_in_order():
    tracker = DeploymentTracker()
    kind = AzureResourceType.APP_SERVICE

    assert tracker.stage(kind) == DeploymentStage.NOT_STARTED
    for stage in (DeploymentStage.SUBSCRIPTION_RESOLVED, DeploymentStage.NAME_VALIDATED,
                  DeploymentStage.CREATED, DeploymentStage.CONFIGURED):
        tracker.advance(kind, stage)
        assert tracker.stage(kind) == stage


def test_skipping_a_stage_is_rejected():
    tracker = DeploymentTracker()

    with pytest.raises(ValueError):
        tracker.advance(AzureResourceType.COSMOS, DeploymentStage.CREATED)

    assert tracker.stage(AzureResourceType.COSMOS) == DeploymentStage.NOT_STARTED


@pytest.mark.parametrize("reached", [
    DeploymentStage.NOT_STARTED,
    DeploymentStage.SUBSCRIPTION_RESOLVED,
    DeploymentStage.NAME_VALIDATED,
])
def test_failed_is_reachable_from_any_stage(reached):
    tracker = DeploymentTracker()
    kind = AzureResourceType.FUNCTIONS
    order = [DeploymentStage.SUBSCRIPTION_RESOLVED, DeploymentStage.NAME_VALIDATED]
    for stage in order[:[DeploymentStage.NOT_STARTED, *order].index(reached)]:
        tracker.advance(kind, stage)

    tracker.advance(kind, DeploymentStage.FAILED)

    assert tracker.stage(kind) == DeploymentStage.FAILED


def test_reset_and_summary():
    tracker = DeploymentTracker()
    tracker.advance(AzureResourceType.APP_SERVICE, DeploymentStage.SUBSCRIPTION_RESOLVED)
    tracker.fail(AzureResourceType.COSMOS)

    assert tracker.summary() == {"AppService": "SubscriptionResolved", "Cosmos": "Failed"}

    tracker.reset(AzureResourceType.COSMOS)
    assert tracker.stage(AzureResourceType.COSMOS) == DeploymentStage.NOT_STARTED
