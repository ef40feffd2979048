"""Constants shared across the orchestrator."""
from dataclasses import dataclass
from enum import Enum


class AzureResourceType(str, Enum):
    APP_SERVICE = "AppService"
    COSMOS = "Cosmos"
    FUNCTIONS = "Functions"
    RESOURCE_GROUP = "ResourceGroup"


@dataclass(frozen=True)
class SkuDescription:
    """App Service plan pricing tier."""
    name: str
    tier: str


class SkuDescriptions:
    FREE = SkuDescription(name="F1", tier="Free")
    BASIC = SkuDescription(name="B1", tier="Basic")


class AzureLocation:
    CENTRAL_US = "Central US"


class Errors:
    SUBSCRIPTION_NOT_FOUND = "Subscription not found"
    LOGIN_TIMEOUT = "Timeout. User is not logged in"
    APP_SERVICE_UNDEFINED_ID = "Undefined App Service ID"
    FUNCTION_APP_UNDEFINED_ID = "Undefined Function App ID"
    COSMOS_UNDEFINED_CONNECTION_STRING = "Undefined Cosmos DB connection string"
    NO_RESOURCE_GROUPS_IN_SUBSCRIPTION = "No resource groups found in subscription {0}"
    EMPTY_NAME = "Name cannot be empty"
    NAME_TOO_SHORT = "Name must be at least {0} characters"
    NAME_TOO_LONG = "Name can be at most {0} characters"
    NAME_INVALID_CHARACTERS = "Name can only contain {0}"
    NAME_INVALID_EDGES = "Name must start and end with a letter or number"
    NAME_TAKEN = "{0} is not available"
    FUNCTION_NAMES_DUPLICATE = "Function names must be unique: {0}"
    FUNCTION_NAME_INVALID = "Invalid function name '{0}': must start with a letter and contain only letters, numbers, '-' and '_'"


class Info:
    FILE_REPLACED_MESSAGE = "Replaced connection string in "


class DialogMessages:
    COSMOS_CONNECTION_STRING_REPLACE_PROMPT = (
        "Replace the Cosmos DB connection string in your .env file "
        "with the connection string of the new database?"
    )


# Linux runtime stack per backend framework
BACKEND_FRAMEWORK_LINUX_VERSION = {
    "Node": "NODE|10.14",
    "Flask": "PYTHON|3.7",
    "Moleculer": "NODE|10.14",
    "AspNet": "DOTNETCORE|3.1",
}

# Function app runtime stack -> FUNCTIONS_WORKER_RUNTIME
FUNCTION_RUNTIMES = {
    "node": "node",
    "dotnet": "dotnet",
    "python": "python",
}

AZURE_MANAGEMENT_SCOPE = "https://management.azure.com/.default"
