"""Tests for distinct resource group planning."""
import asyncio
from unittest.mock import AsyncMock

import pytest

from acorn.errors import DeploymentError, SubscriptionError
from acorn.selections.schema import DeploymentPayload


def _payload(app_sub=None, cosmos_sub=None, functions_sub=None, project_name="myapp"):
    data = {"engine": {"projectName": project_name, "path": "/tmp/myapp"}}
    if app_sub:
        data["selectedAppService"] = True
        data["appService"] = {"subscription": app_sub, "siteName": "myapp"}
    if cosmos_sub:
        data["selectedCosmos"] = True
        data["cosmos"] = {"subscription": cosmos_sub, "accountName": "myapp-db"}
    if functions_sub:
        data["selectedFunctions"] = True
        data["functions"] = {"subscription": functions_sub, "appName": "myfuncs"}
    return DeploymentPayload.model_validate(data)


def test_same_subscription_yields_one_selection(services, dev_subscription, resource_group_provider):
    payload = _payload(app_sub="Dev Subscription", cosmos_sub="Dev Subscription")

    selections = asyncio.run(services.generate_distinct_resource_group_selections(payload))

    assert len(selections) == 1
    assert selections[0].subscription_item is dev_subscription
    assert selections[0].resource_group_name == "myapp-dev"
    assert selections[0].location == "Central US"
    resource_group_provider.generate_valid_resource_group_name.assert_awaited_once_with(
        "myapp", [dev_subscription]
    )


def test_each_subscription_gets_one_selection(services, dev_subscription, other_subscription):
    payload = _payload(app_sub="Dev Subscription", cosmos_sub="Other Subscription",
                       functions_sub="Dev Subscription")

    selections = asyncio.run(services.generate_distinct_resource_group_selections(payload))

    # functions first, then cosmos, then app service
    assert [s.subscription_item for s in selections] == [dev_subscription, other_subscription]
    assert {s.resource_group_name for s in selections} == {"myapp-dev"}


def test_sandbox_reuses_first_existing_group(services, learn_subscription, resource_group_provider):
    payload = _payload(app_sub="Concierge Subscription")

    selections = asyncio.run(services.generate_distinct_resource_group_selections(payload))

    assert len(selections) == 1
    assert selections[0].resource_group_name == "learn-1234"
    resource_group_provider.get_resource_groups.assert_awaited_once_with(learn_subscription)


def test_sandbox_without_groups_fails(services, resource_group_provider, observed_errors):
    resource_group_provider.get_resource_groups = AsyncMock(return_value=[])

    with pytest.raises(DeploymentError, match="Concierge Subscription"):
        asyncio.run(services.generate_distinct_resource_group_selections(
            _payload(cosmos_sub="Concierge Subscription")))

    assert observed_errors[0][0] == "generate_resource_group_selections"


def test_unknown_subscription_fails(services):
    with pytest.raises(SubscriptionError):
        asyncio.run(services.generate_distinct_resource_group_selections(_payload(app_sub="Gone")))


def test_nothing_selected_yields_nothing(services):
    assert asyncio.run(services.generate_distinct_resource_group_selections(_payload())) == []


def test_sandbox_group_is_not_created(services, learn_subscription, dev_subscription, resource_group_provider):
    payload = _payload(app_sub="Concierge Subscription", cosmos_sub="Dev Subscription")
    selections = asyncio.run(services.generate_distinct_resource_group_selections(payload))

    results = [asyncio.run(services.deploy_resource_group(s)) for s in selections]

    created = [call.args[0] for call in resource_group_provider.create_resource_group.await_args_list]
    assert [s.subscription_item for s in created] == [dev_subscription]
    assert results[1] is None
