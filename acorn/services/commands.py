"""Commands accepted from the wizard UI and the message shape they carry."""
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ExtensionCommand(str, Enum):
    LOGIN = "login"
    LOGOUT = "logout"
    GET_USER_STATUS = "get-user-status"
    GET_SUBSCRIPTION_DATA_FOR_APP_SERVICE = "get-subscription-data-for-app-service"
    GET_SUBSCRIPTION_DATA_FOR_COSMOS = "get-subscription-data-for-cosmos"
    GET_SUBSCRIPTION_DATA_FOR_FUNCTIONS = "get-subscription-data-for-functions"
    GET_VALID_APP_SERVICE_NAME = "get-valid-app-service-name"
    GET_VALID_COSMOS_NAME = "get-valid-cosmos-name"
    GET_VALID_FUNCTIONS_NAME = "get-valid-functions-name"
    NAME_APP_SERVICE = "name-app-service"
    NAME_COSMOS = "name-cosmos"
    NAME_FUNCTIONS = "name-functions"


class MessagePayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    scope: Any = None


class WizardMessage(BaseModel):
    """A command message from the UI.

    ``payload.scope`` is opaque and echoed back so the UI can match
    responses to requests.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    command: Optional[str] = None
    payload: MessagePayload = Field(default_factory=MessagePayload)
    subscription: Optional[str] = None
    project_name: Optional[str] = Field(default=None, alias="projectName")
    app_name: Optional[str] = Field(default=None, alias="appName")

    @property
    def scope(self) -> Any:
        return self.payload.scope


def payload_response(payload: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Wrap a payload in the response envelope."""
    return {"payload": payload}
