"""Tests for live name validation through the orchestrator."""
import asyncio
from unittest.mock import AsyncMock

import pytest

from acorn.constants import AzureResourceType
from acorn.errors import SubscriptionError
from acorn.services.commands import ExtensionCommand


def _validate(services, command, name, subscription="Dev Subscription", scope=5):
    return asyncio.run(services.handle(command, {
        "payload": {"scope": scope},
        "subscription": subscription,
        "appName": name,
    }))


def test_available_then_taken(services, app_service_provider):
    response = _validate(services, ExtensionCommand.NAME_APP_SERVICE, "myapp123")
    assert response == {"payload": {"scope": 5, "isAvailable": True, "reason": None}}

    app_service_provider.check_web_app_name = AsyncMock(return_value="Hostname 'myapp123' already exists.")
    response = _validate(services, ExtensionCommand.NAME_APP_SERVICE, "myapp123")
    assert response == {"payload": {
        "scope": 5, "isAvailable": False, "reason": "Hostname 'myapp123' already exists.",
    }}


def test_validation_is_idempotent(services, cosmos_provider):
    cosmos_provider.validate_cosmos_db_account_name = AsyncMock(return_value="mydb is not available")

    first = asyncio.run(services.validate_name(AzureResourceType.COSMOS, "mydb", "Dev Subscription"))
    second = asyncio.run(services.validate_name(AzureResourceType.COSMOS, "mydb", "Dev Subscription"))

    assert first == second
    assert first.available is False
    assert first.reason == "mydb is not available"


def test_empty_reason_means_available(services, function_provider):
    function_provider.check_function_app_name = AsyncMock(return_value="")

    response = _validate(services, ExtensionCommand.NAME_FUNCTIONS, "funcs")

    assert response["payload"]["isAvailable"] is True
    assert response["payload"]["reason"] is None


def test_validation_uses_cached_subscription(services, app_service_provider, dev_subscription):
    _validate(services, ExtensionCommand.NAME_APP_SERVICE, "a1")
    _validate(services, ExtensionCommand.NAME_APP_SERVICE, "a12")

    for call in app_service_provider.check_web_app_name.await_args_list:
        assert call.args[1] is dev_subscription
    assert services.cache.get(AzureResourceType.APP_SERVICE) is dev_subscription


def test_unknown_subscription_raises(services, observed_errors, app_service_provider):
    with pytest.raises(SubscriptionError):
        _validate(services, ExtensionCommand.NAME_COSMOS, "mydb", subscription="Gone")

    assert observed_errors[0][0] == "validate_Cosmos_name"


def test_provider_errors_are_rethrown_unchanged(services, app_service_provider, observed_errors):
    failure = ConnectionError("network down")
    app_service_provider.check_web_app_name = AsyncMock(side_effect=failure)

    with pytest.raises(ConnectionError) as excinfo:
        _validate(services, ExtensionCommand.NAME_APP_SERVICE, "myapp")

    assert excinfo.value is failure
    assert observed_errors == [("validate_AppService_name", failure)]
