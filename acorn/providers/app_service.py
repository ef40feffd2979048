"""App Service (web app) provider."""
import asyncio
import logging
from pathlib import Path
from typing import Dict, Optional

from azure.mgmt.web import WebSiteManagementClient
from azure.mgmt.web.models import StringDictionary

from ..auth.models import SubscriptionItem
from ..constants import AzureResourceType, Errors, SkuDescriptions
from ..naming.generator import NameGenerator
from ..naming.validator import APP_SERVICE_PLAN_RULE, NameValidator
from .deployment import deploy_template
from .models import AppServiceSelections
from .templates import render_template, to_parameters, write_template_files

logger = logging.getLogger(__name__)

WEB_SITE_RESOURCE_TYPE = "Microsoft.Web/sites"


class AppServiceProvider:
    """Creates web apps and checks web app names."""

    def __init__(self, arm_templates_dir: str = "arm-templates"):
        self.arm_templates_dir = arm_templates_dir

    @staticmethod
    def _client(subscription: SubscriptionItem) -> WebSiteManagementClient:
        return WebSiteManagementClient(subscription.session.credential, subscription.subscription_id)

    async def check_web_app_name(self, app_name: str, subscription: SubscriptionItem) -> Optional[str]:
        """Check that a web app name is well formed and not taken.

        Returns:
            Optional[str]: Why the name can't be used, or None if it is available.
        """
        invalid_reason = NameValidator.check_name_for_kind(app_name, AzureResourceType.APP_SERVICE)
        if invalid_reason:
            return invalid_reason

        client = self._client(subscription)
        result = await asyncio.to_thread(
            client.check_name_availability, name=app_name, type=WEB_SITE_RESOURCE_TYPE
        )
        if result.name_available:
            return None
        return result.message or Errors.NAME_TAKEN.format(app_name)

    def generate_valid_asp_name(self, project_name: str) -> str:
        """App Service plan name for a project."""
        return NameGenerator.generate_name(project_name, APP_SERVICE_PLAN_RULE, suffix="asp")

    async def create_web_app(self, selections: AppServiceSelections, app_path: str) -> Optional[str]:
        """Create the App Service plan and web app through a template deployment.

        Args:
            selections: Assembled web app selections.
            app_path: Generated project directory; templates are written below it.

        Returns:
            Optional[str]: Id of the template deployment.
        """
        template = render_template(
            "appservice",
            always_on=selections.tier != SkuDescriptions.FREE.tier,
        )
        parameters = to_parameters({
            "siteName": selections.site_name,
            "location": selections.location,
            "appServicePlanName": selections.app_service_plan_name,
            "sku": selections.sku,
            "tier": selections.tier,
            "linuxFxVersion": selections.linux_fx_version,
        })
        write_template_files(Path(app_path) / self.arm_templates_dir, "appservice", template, parameters)

        deployment_name = f"{selections.site_name}-{AzureResourceType.APP_SERVICE.value}"
        return await deploy_template(
            selections.subscription_item,
            selections.resource_group_item.name,
            deployment_name,
            template,
            parameters,
        )

    async def update_app_settings(self, subscription: SubscriptionItem, resource_group_name: str,
                                  web_app_name: str, settings: Dict[str, str]) -> None:
        """Replace a web app's application settings."""
        client = self._client(subscription)
        logger.info("Updating app settings of %s", web_app_name)
        await asyncio.to_thread(
            client.web_apps.update_application_settings,
            resource_group_name,
            web_app_name,
            StringDictionary(properties=settings),
        )
