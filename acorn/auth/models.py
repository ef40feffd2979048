"""Data models for authenticated Azure sessions."""
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class SessionInfo:
    """Identity a subscription was listed under."""
    tenant_id: str
    user_id: str = ""
    credential: Any = field(default=None, repr=False)


@dataclass(eq=False)
class SubscriptionItem:
    """A subscription visible to the logged-in user.

    Compared and hashed by identity: two items are the same subscription
    only if they are the same object from the session list.
    """
    label: str
    subscription_id: str
    session: SessionInfo


@dataclass
class ResourceGroupItem:
    """An existing resource group."""
    name: str
    location: str
    id: Optional[str] = None


@dataclass
class LocationItem:
    """An Azure location a resource type can be created in."""
    name: str
    location_display_name: str
