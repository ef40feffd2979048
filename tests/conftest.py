"""Shared fixtures: subscriptions, a fake auth source and fake providers."""
from unittest.mock import AsyncMock, MagicMock

import pytest

from acorn.auth.models import LocationItem, ResourceGroupItem, SessionInfo, SubscriptionItem
from acorn.config import MICROSOFT_LEARN_TENANTS, AcornSettings
from acorn.services.azure_services import AzureServices

HOME_TENANT = "11111111-1111-1111-1111-111111111111"
LEARN_TENANT = MICROSOFT_LEARN_TENANTS[0]


@pytest.fixture
def dev_subscription():
    return SubscriptionItem(
        label="Dev Subscription",
        subscription_id="sub-dev",
        session=SessionInfo(tenant_id=HOME_TENANT, user_id="dev@example.com"),
    )


@pytest.fixture
def other_subscription():
    return SubscriptionItem(
        label="Other Subscription",
        subscription_id="sub-other",
        session=SessionInfo(tenant_id=HOME_TENANT, user_id="dev@example.com"),
    )


@pytest.fixture
def learn_subscription():
    return SubscriptionItem(
        label="Concierge Subscription",
        subscription_id="sub-learn",
        session=SessionInfo(tenant_id=LEARN_TENANT, user_id="dev@example.com"),
    )


@pytest.fixture
def subscriptions(dev_subscription, other_subscription, learn_subscription):
    return [dev_subscription, other_subscription, learn_subscription]


@pytest.fixture
def fake_auth(subscriptions):
    auth = MagicMock()
    auth.login = AsyncMock(return_value=True)
    auth.logout = AsyncMock(return_value=True)
    auth.get_email.return_value = "dev@example.com"
    auth.get_subscriptions = AsyncMock(return_value=subscriptions)
    auth.get_all_resource_group_items = AsyncMock(return_value=[
        ResourceGroupItem(name="rg-one", location="centralus"),
        ResourceGroupItem(name="rg-two", location="westus"),
    ])
    auth.get_resource_group_item = AsyncMock(
        side_effect=lambda name, subscription: ResourceGroupItem(name=name, location="centralus")
    )
    auth.get_locations_for_app = AsyncMock(return_value=[LocationItem("centralus", "Central US")])
    auth.get_locations_for_cosmos = AsyncMock(return_value=[
        LocationItem("centralus", "Central US"),
        LocationItem("westus", "West US"),
    ])
    return auth


@pytest.fixture
def app_service_provider():
    provider = MagicMock()
    provider.check_web_app_name = AsyncMock(return_value=None)
    provider.generate_valid_asp_name.return_value = "myapp-asp"
    provider.create_web_app = AsyncMock(
        return_value="/subscriptions/sub-dev/resourceGroups/rg/providers/"
                     "Microsoft.Resources/deployments/myapp-AppService"
    )
    provider.update_app_settings = AsyncMock()
    return provider


@pytest.fixture
def cosmos_provider():
    provider = MagicMock()
    provider.validate_cosmos_db_account_name = AsyncMock(return_value=None)
    provider.create_cosmos_db = AsyncMock()
    return provider


@pytest.fixture
def function_provider():
    provider = MagicMock()
    provider.check_function_app_name = AsyncMock(return_value=None)
    provider.create_function_app = AsyncMock(
        return_value="/subscriptions/sub-dev/resourceGroups/rg/providers/"
                     "Microsoft.Resources/deployments/myfuncs-Functions"
    )
    return provider


@pytest.fixture
def resource_group_provider():
    provider = MagicMock()
    provider.generate_valid_resource_group_name = AsyncMock(return_value="myapp-dev")
    provider.get_resource_groups = AsyncMock(return_value=[
        ResourceGroupItem(name="learn-1234", location="westus"),
        ResourceGroupItem(name="learn-5678", location="westus"),
    ])
    provider.create_resource_group = AsyncMock(
        side_effect=lambda selection: ResourceGroupItem(selection.resource_group_name, selection.location)
    )
    return provider


@pytest.fixture
def prompter():
    prompter = MagicMock()
    prompter.confirm.return_value = True
    return prompter


@pytest.fixture
def observed_errors():
    return []


@pytest.fixture
def services(fake_auth, subscriptions, app_service_provider, cosmos_provider, function_provider,
             resource_group_provider, prompter, observed_errors):
    """Orchestrator wired to fakes, with the session subscription list loaded."""
    services = AzureServices(
        fake_auth,
        settings=AcornSettings(),
        app_service_provider=app_service_provider,
        cosmos_provider=cosmos_provider,
        function_provider=function_provider,
        resource_group_provider=resource_group_provider,
        prompter=prompter,
        error_observer=lambda operation, error: observed_errors.append((operation, error)),
    )
    services.cache.replace_subscriptions(subscriptions)
    return services
