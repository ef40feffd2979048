"""Function App provider."""
import asyncio
from pathlib import Path
from typing import Optional

from azure.mgmt.web import WebSiteManagementClient

from ..auth.models import SubscriptionItem
from ..constants import FUNCTION_RUNTIMES, AzureResourceType, Errors
from ..errors import ValidationError
from ..naming.generator import NameGenerator
from ..naming.validator import STORAGE_ACCOUNT_RULE, NameValidator
from .deployment import deploy_template
from .models import FunctionSelections
from .templates import render_template, to_parameters, write_template_files

WEB_SITE_RESOURCE_TYPE = "Microsoft.Web/sites"


class FunctionProvider:
    """Creates function apps and checks function app names."""

    def __init__(self, arm_templates_dir: str = "arm-templates"):
        self.arm_templates_dir = arm_templates_dir

    async def check_function_app_name(self, app_name: str, subscription: SubscriptionItem) -> Optional[str]:
        """Check that a function app name is well formed and not taken.

        Function apps share the web app namespace.
        """
        invalid_reason = NameValidator.check_name_for_kind(app_name, AzureResourceType.FUNCTIONS)
        if invalid_reason:
            return invalid_reason

        client = WebSiteManagementClient(subscription.session.credential, subscription.subscription_id)
        result = await asyncio.to_thread(
            client.check_name_availability, name=app_name, type=WEB_SITE_RESOURCE_TYPE
        )
        if result.name_available:
            return None
        return result.message or Errors.NAME_TAKEN.format(app_name)

    @staticmethod
    def storage_account_name(function_app_name: str) -> str:
        return NameGenerator.generate_name(function_app_name, STORAGE_ACCOUNT_RULE)

    async def create_function_app(self, selections: FunctionSelections, app_path: str) -> Optional[str]:
        """Create the function app, its consumption plan and storage account.

        Returns:
            Optional[str]: Id of the template deployment.
        """
        runtime = FUNCTION_RUNTIMES.get(selections.runtime.lower())
        if runtime is None:
            raise ValidationError(f"Unsupported function runtime: {selections.runtime}")

        template = render_template("functionapp", function_names=selections.function_names)
        parameters = to_parameters({
            "functionAppName": selections.function_app_name,
            "storageAccountName": self.storage_account_name(selections.function_app_name),
            "location": selections.location,
            "runtime": runtime,
        })
        write_template_files(Path(app_path) / self.arm_templates_dir, "functionapp", template, parameters)

        return await deploy_template(
            selections.subscription_item,
            selections.resource_group_item.name,
            f"{selections.function_app_name}-{AzureResourceType.FUNCTIONS.value}",
            template,
            parameters,
        )
