"""Selections passed to provider create calls."""
from dataclasses import dataclass, field
from typing import List, Optional

from ..auth.models import ResourceGroupItem, SubscriptionItem


@dataclass
class ResourceGroupSelection:
    """Where a resource group is created (or reused, for sandbox subscriptions)."""
    subscription_item: SubscriptionItem
    resource_group_name: str
    location: str


@dataclass
class AppServiceSelections:
    """Everything needed to create a web app and its plan."""
    site_name: str
    subscription_item: SubscriptionItem
    resource_group_item: ResourceGroupItem
    app_service_plan_name: str
    tier: str
    sku: str
    linux_fx_version: str
    location: str


@dataclass
class CosmosDBSelections:
    """Everything needed to create a Cosmos DB account."""
    cosmos_api: str
    cosmos_db_resource_name: str
    location: str
    resource_group_item: ResourceGroupItem
    subscription_item: SubscriptionItem


@dataclass
class FunctionSelections:
    """Everything needed to create a function app."""
    function_app_name: str
    subscription_item: SubscriptionItem
    resource_group_item: ResourceGroupItem
    location: str
    runtime: str
    function_names: List[str] = field(default_factory=list)


@dataclass
class DatabaseObject:
    """A created Cosmos DB account and its primary connection string."""
    database_name: str
    connection_string: str
    id: Optional[str] = None
