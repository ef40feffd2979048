"""Resource group provider."""
import asyncio
import logging
from typing import List, Sequence

from azure.mgmt.resource import ResourceManagementClient
from azure.mgmt.resource.resources.models import ResourceGroup

from ..auth.models import ResourceGroupItem, SubscriptionItem
from ..constants import AzureResourceType
from ..naming.generator import NameGenerator
from ..naming.validator import NAME_RULES
from .models import ResourceGroupSelection

logger = logging.getLogger(__name__)


class ResourceGroupDeploy:
    """Lists, names and creates resource groups."""

    @staticmethod
    def _client(subscription: SubscriptionItem) -> ResourceManagementClient:
        return ResourceManagementClient(subscription.session.credential, subscription.subscription_id)

    async def get_resource_groups(self, subscription: SubscriptionItem) -> List[ResourceGroupItem]:
        def _list():
            return [
                ResourceGroupItem(name=group.name, location=group.location, id=group.id)
                for group in self._client(subscription).resource_groups.list()
            ]
        return await asyncio.to_thread(_list)

    async def generate_valid_resource_group_name(self, project_name: str,
                                                 subscriptions: Sequence[SubscriptionItem]) -> str:
        """Generate a resource group name unused in every given subscription.

        Existing groups of all subscriptions are listed concurrently; a numeric
        suffix is added until the name is free everywhere.
        """
        rule = NAME_RULES[AzureResourceType.RESOURCE_GROUP]
        base_name = NameGenerator.generate_valid_name(project_name, AzureResourceType.RESOURCE_GROUP)

        existing = await asyncio.gather(*(self.get_resource_groups(s) for s in subscriptions))
        taken = {group.name.lower() for groups in existing for group in groups}

        name = base_name
        counter = 1
        while name.lower() in taken:
            name = NameGenerator.generate_name(base_name, rule, suffix=str(counter))
            counter += 1
        logger.debug("Generated resource group name %s", name)
        return name

    async def create_resource_group(self, selection: ResourceGroupSelection) -> ResourceGroupItem:
        """Create (or update) the selected resource group."""
        client = self._client(selection.subscription_item)
        logger.info("Creating resource group %s in %s", selection.resource_group_name, selection.location)
        group = await asyncio.to_thread(
            client.resource_groups.create_or_update,
            selection.resource_group_name,
            ResourceGroup(location=selection.location),
        )
        return ResourceGroupItem(name=group.name, location=group.location, id=group.id)
