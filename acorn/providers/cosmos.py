"""Cosmos DB provider."""
import asyncio
import logging
from pathlib import Path
from typing import Optional

from azure.mgmt.cosmosdb import CosmosDBManagementClient

from ..auth.models import SubscriptionItem
from ..constants import AzureResourceType, Errors
from ..errors import DeploymentError, ValidationError
from ..naming.connection_string import ConnectionString
from ..naming.validator import NameValidator
from .deployment import deploy_template
from .models import CosmosDBSelections, DatabaseObject
from .templates import render_template, to_parameters, write_template_files

logger = logging.getLogger(__name__)

# Cosmos API -> (account kind, capabilities)
COSMOS_APIS = {
    "MongoDB": ("MongoDB", ["EnableMongo"]),
    "SQL": ("GlobalDocumentDB", []),
}


class CosmosDBDeploy:
    """Creates Cosmos DB accounts and checks account names."""

    def __init__(self, arm_templates_dir: str = "arm-templates"):
        self.arm_templates_dir = arm_templates_dir

    @staticmethod
    def _client(subscription: SubscriptionItem) -> CosmosDBManagementClient:
        return CosmosDBManagementClient(subscription.session.credential, subscription.subscription_id)

    async def validate_cosmos_db_account_name(self, account_name: str,
                                              subscription: SubscriptionItem) -> Optional[str]:
        """Check that an account name is well formed and not taken.

        Returns:
            Optional[str]: Why the name can't be used, or None if it is available.
        """
        invalid_reason = NameValidator.check_name_for_kind(account_name, AzureResourceType.COSMOS)
        if invalid_reason:
            return invalid_reason

        client = self._client(subscription)
        exists = await asyncio.to_thread(client.database_accounts.check_name_exists, account_name)
        if exists:
            return Errors.NAME_TAKEN.format(account_name)
        return None

    async def create_cosmos_db(self, selections: CosmosDBSelections, gen_path: str) -> DatabaseObject:
        """Create a Cosmos DB account and fetch its primary connection string."""
        if selections.cosmos_api not in COSMOS_APIS:
            raise ValidationError(f"Unsupported Cosmos DB API: {selections.cosmos_api}")
        kind, capabilities = COSMOS_APIS[selections.cosmos_api]

        template = render_template("cosmos", kind=kind, capabilities=capabilities)
        parameters = to_parameters({
            "name": selections.cosmos_db_resource_name,
            "location": selections.location,
        })
        write_template_files(Path(gen_path) / self.arm_templates_dir, "cosmos", template, parameters)

        resource_group_name = selections.resource_group_item.name
        await deploy_template(
            selections.subscription_item,
            resource_group_name,
            f"{selections.cosmos_db_resource_name}-{AzureResourceType.COSMOS.value}",
            template,
            parameters,
        )

        client = self._client(selections.subscription_item)
        account = await asyncio.to_thread(
            client.database_accounts.get, resource_group_name, selections.cosmos_db_resource_name
        )
        keys = await asyncio.to_thread(
            client.database_accounts.list_connection_strings,
            resource_group_name,
            selections.cosmos_db_resource_name,
        )
        connection_strings = keys.connection_strings or []
        if not connection_strings or not connection_strings[0].connection_string:
            raise DeploymentError(Errors.COSMOS_UNDEFINED_CONNECTION_STRING)

        return DatabaseObject(
            database_name=selections.cosmos_db_resource_name,
            connection_string=connection_strings[0].connection_string,
            id=account.id,
        )

    @staticmethod
    def update_connection_string_in_env_file(path_to_env: str, connection_string: str) -> None:
        """Write a connection string's fields into a .env file.

        Existing lines for the same keys are replaced in place; other lines are
        kept and missing keys are appended.
        """
        parsed = ConnectionString.parse_connection_string(connection_string)
        fields = {}
        for line in parsed.splitlines():
            key, _, value = line.partition("=")
            fields[key] = value

        env_path = Path(path_to_env)
        lines = env_path.read_text().splitlines() if env_path.exists() else []

        output = []
        for line in lines:
            key = line.partition("=")[0].strip()
            if key in fields:
                output.append(f"{key}={fields.pop(key)}")
            else:
                output.append(line)
        output.extend(f"{key}={value}" for key, value in fields.items())

        env_path.parent.mkdir(parents=True, exist_ok=True)
        env_path.write_text("\n".join(output) + "\n")
        logger.info("Updated connection string in %s", env_path)
