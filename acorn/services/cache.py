"""Per-resource-kind subscription cache.

Live name validation runs on every keystroke in the wizard, so each resource
kind remembers the subscription it last resolved.
"""
import logging
from typing import Dict, List, Optional, Sequence

from ..auth.models import SubscriptionItem
from ..constants import AzureResourceType, Errors
from ..errors import SubscriptionError

logger = logging.getLogger(__name__)


class SubscriptionCache:
    """Session subscription list plus one cached subscription per resource kind."""

    def __init__(self, subscriptions: Optional[Sequence[SubscriptionItem]] = None):
        self.subscriptions: List[SubscriptionItem] = list(subscriptions or [])
        self._entries: Dict[AzureResourceType, SubscriptionItem] = {}

    def replace_subscriptions(self, subscriptions: Sequence[SubscriptionItem]) -> None:
        """Swap in a freshly fetched subscription list.

        Cached entries whose item is not in the new list are dropped, so the
        next ensure() resolves their label against the fresh list.
        """
        self.subscriptions = list(subscriptions)
        for kind, cached in list(self._entries.items()):
            if not any(cached is subscription for subscription in self.subscriptions):
                del self._entries[kind]

    def clear(self) -> None:
        self.subscriptions = []
        self._entries.clear()

    def find(self, label: str) -> SubscriptionItem:
        """Look a subscription up by label in the session list.

        Raises:
            SubscriptionError: If no subscription has that label.
        """
        for subscription in self.subscriptions:
            if subscription.label == label:
                return subscription
        raise SubscriptionError(Errors.SUBSCRIPTION_NOT_FOUND)

    def get(self, kind: AzureResourceType) -> Optional[SubscriptionItem]:
        return self._entries.get(kind)

    def ensure(self, kind: AzureResourceType, label: str) -> SubscriptionItem:
        """Return the cached subscription for a kind, refreshing it if the label changed.

        Raises:
            SubscriptionError: If the label is not in the session list. The
                cached entry is left unchanged.
        """
        cached = self._entries.get(kind)
        if cached is not None and cached.label == label:
            return cached

        subscription = self.find(label)
        self._entries[kind] = subscription
        logger.debug("Cached subscription %s for %s", label, kind.value)
        return subscription
