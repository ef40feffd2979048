"""Tests for the resource group provider."""
import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from acorn.auth.models import ResourceGroupItem
from acorn.providers.models import ResourceGroupSelection
from acorn.providers.resource_group import ResourceGroupDeploy


def _group(name, location="centralus"):
    group = MagicMock(location=location, id=f"/subscriptions/x/resourceGroups/{name}")
    group.name = name
    return group


@pytest.fixture
def resource_client():
    with patch("acorn.providers.resource_group.ResourceManagementClient") as client_class:
        yield client_class.return_value


@pytest.fixture
def local_user():
    with patch("acorn.naming.generator.getpass.getuser", return_value="jdoe"):
        yield


def test_get_resource_groups(resource_client, dev_subscription):
    resource_client.resource_groups.list.return_value = [_group("rg-one"), _group("rg-two", "westus")]

    groups = asyncio.run(ResourceGroupDeploy().get_resource_groups(dev_subscription))

    assert [(g.name, g.location) for g in groups] == [("rg-one", "centralus"), ("rg-two", "westus")]
    assert groups[0].id == "/subscriptions/x/resourceGroups/rg-one"


def test_unused_name_is_kept(local_user, dev_subscription):
    provider = ResourceGroupDeploy()
    provider.get_resource_groups = AsyncMock(return_value=[ResourceGroupItem("other", "centralus")])

    name = asyncio.run(provider.generate_valid_resource_group_name("My App", [dev_subscription]))

    assert name == "my-app-jdoe"


def test_taken_name_gets_numeric_suffix(local_user, dev_subscription, other_subscription):
    groups = {
        dev_subscription.subscription_id: [ResourceGroupItem("My-App-Jdoe", "centralus")],
        other_subscription.subscription_id: [ResourceGroupItem("my-app-jdoe-1", "centralus")],
    }
    provider = ResourceGroupDeploy()
    provider.get_resource_groups = AsyncMock(side_effect=lambda s: groups[s.subscription_id])

    name = asyncio.run(provider.generate_valid_resource_group_name(
        "My App", [dev_subscription, other_subscription]))

    assert name == "my-app-jdoe-2"
    assert provider.get_resource_groups.await_count == 2


def test_create_resource_group(resource_client, dev_subscription):
    resource_client.resource_groups.create_or_update.return_value = _group("myapp-dev")
    selection = ResourceGroupSelection(dev_subscription, "myapp-dev", "Central US")

    group = asyncio.run(ResourceGroupDeploy().create_resource_group(selection))

    name, parameters = resource_client.resource_groups.create_or_update.call_args.args
    assert name == "myapp-dev"
    assert parameters.location == "Central US"
    assert group.name == "myapp-dev"
