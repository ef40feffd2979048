"""Azure sign-in and subscription, resource group and location listing."""
import asyncio
import logging
from typing import List, Optional

from azure.core.exceptions import ClientAuthenticationError
from azure.identity import AuthenticationRecord, InteractiveBrowserCredential, TokenCachePersistenceOptions
from azure.mgmt.resource import ResourceManagementClient
from azure.mgmt.subscription import SubscriptionClient

from ..config import AcornSettings
from ..constants import AZURE_MANAGEMENT_SCOPE
from ..errors import AuthorizationError
from .models import LocationItem, ResourceGroupItem, SessionInfo, SubscriptionItem

logger = logging.getLogger(__name__)

TOKEN_CACHE_NAME = "acorn"

# Resource provider namespace and type checked for supported locations
APP_RESOURCE_TYPE = ("Microsoft.Web", "sites")
COSMOS_RESOURCE_TYPE = ("Microsoft.DocumentDB", "databaseAccounts")


class AzureAuth:
    """Signs the user in and lists what their account can see.

    The authentication record is persisted so a later process can reuse the
    session from the shared token cache without signing in again.
    """

    def __init__(self, settings: Optional[AcornSettings] = None):
        self.settings = settings or AcornSettings()
        self._record: Optional[AuthenticationRecord] = None
        self._credential = None
        self._load_record()

    def _build_credential(self, record: Optional[AuthenticationRecord] = None) -> InteractiveBrowserCredential:
        return InteractiveBrowserCredential(
            authentication_record=record,
            cache_persistence_options=TokenCachePersistenceOptions(
                name=TOKEN_CACHE_NAME,
                allow_unencrypted_storage=self.settings.allow_unencrypted_token_cache,
            ),
        )

    def _load_record(self) -> None:
        path = self.settings.auth_record_path
        if not path.exists():
            return
        self._record = AuthenticationRecord.deserialize(path.read_text())
        self._credential = self._build_credential(self._record)
        logger.debug("Loaded authentication record for %s", self._record.username)

    async def login(self) -> bool:
        """Sign in interactively.

        Returns:
            bool: True if the user is now signed in.
        """
        credential = self._build_credential()
        try:
            record = await asyncio.to_thread(credential.authenticate, scopes=[AZURE_MANAGEMENT_SCOPE])
        except ClientAuthenticationError as e:
            logger.warning("Sign-in did not complete: %s", e)
            return False

        self._record = record
        self._credential = credential
        path = self.settings.auth_record_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(record.serialize())
        return True

    async def logout(self) -> bool:
        self._record = None
        self._credential = None
        path = self.settings.auth_record_path
        if path.exists():
            path.unlink()
        return True

    def get_email(self) -> str:
        """Signed-in user name, or an empty string when signed out."""
        return self._record.username if self._record else ""

    def _require_credential(self):
        if self._credential is None:
            raise AuthorizationError("User is not logged in")
        return self._credential

    async def get_subscriptions(self) -> List[SubscriptionItem]:
        credential = self._require_credential()
        record = self._record

        def _list():
            client = SubscriptionClient(credential)
            return [
                SubscriptionItem(
                    label=subscription.display_name,
                    subscription_id=subscription.subscription_id,
                    session=SessionInfo(
                        tenant_id=getattr(subscription, "tenant_id", None) or record.tenant_id,
                        user_id=record.username,
                        credential=credential,
                    ),
                )
                for subscription in client.subscriptions.list()
            ]
        return await asyncio.to_thread(_list)

    async def get_all_resource_group_items(self, subscription: SubscriptionItem) -> List[ResourceGroupItem]:
        def _list():
            client = ResourceManagementClient(subscription.session.credential, subscription.subscription_id)
            return [
                ResourceGroupItem(name=group.name, location=group.location, id=group.id)
                for group in client.resource_groups.list()
            ]
        return await asyncio.to_thread(_list)

    async def get_resource_group_item(self, name: str, subscription: SubscriptionItem) -> ResourceGroupItem:
        client = ResourceManagementClient(subscription.session.credential, subscription.subscription_id)
        group = await asyncio.to_thread(client.resource_groups.get, name)
        return ResourceGroupItem(name=group.name, location=group.location, id=group.id)

    async def get_locations_for_app(self, subscription: SubscriptionItem) -> List[LocationItem]:
        return await self._get_locations(subscription, *APP_RESOURCE_TYPE)

    async def get_locations_for_cosmos(self, subscription: SubscriptionItem) -> List[LocationItem]:
        return await self._get_locations(subscription, *COSMOS_RESOURCE_TYPE)

    async def _get_locations(self, subscription: SubscriptionItem, namespace: str,
                             resource_type: str) -> List[LocationItem]:
        """Subscription locations where a resource type can be created."""
        def _list():
            credential = subscription.session.credential
            locations = [
                LocationItem(name=location.name, location_display_name=location.display_name)
                for location in SubscriptionClient(credential).subscriptions.list_locations(
                    subscription.subscription_id
                )
            ]
            provider = ResourceManagementClient(credential, subscription.subscription_id).providers.get(namespace)
            supported = set()
            for provider_type in provider.resource_types or []:
                if provider_type.resource_type.lower() == resource_type.lower():
                    supported = {location.lower() for location in provider_type.locations or []}
                    break
            if not supported:
                return locations
            return [l for l in locations if l.location_display_name.lower() in supported]
        return await asyncio.to_thread(_list)
