import logging
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

from franklin.client.api import FranklinApiClient, FranklinApiError
from franklin.services import entitlement

logger = logging.getLogger(__name__)


class SubscriptionSyncError(Exception):
    """A user-requested sync failed. Callers show this to the user."""


@dataclass
class UserSubscription:
    customer_id: str
    subscription_status: str
    subscription_id: Optional[str] = None
    price_id: Optional[str] = None
    current_period_start: Optional[int] = None
    current_period_end: Optional[int] = None
    cancel_at_period_end: bool = False
    payment_method_brand: Optional[str] = None
    payment_method_last4: Optional[str] = None
    updated_at: Optional[str] = None
    product_name: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "UserSubscription":
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in row.items() if key in known})


def sync_caller_subscription(api: FranklinApiClient) -> Dict[str, Any]:
    """Look up the caller's Stripe customer and ask the backend to re-sync it from Stripe."""
    try:
        customers = api.get_customers()
        if not customers:
            raise SubscriptionSyncError("No customer record found")
        result = api.sync_subscription(customers[0]["customer_id"])
    except FranklinApiError as e:
        raise SubscriptionSyncError(str(e)) from e

    if not result.get("success"):
        raise SubscriptionSyncError(result.get("error") or "Failed to sync subscription")
    return result


class SubscriptionViewModel:
    """
    Subscription state for the signed-in user.

    fetch() is the passive path (screen load, pull-to-refresh): failures are
    logged and kept in `error`, and the last good subscription stays in place.
    sync() is the explicit path (a button): failures raise SubscriptionSyncError.
    """

    def __init__(self, api: FranklinApiClient):
        self.api = api
        self.subscription: Optional[UserSubscription] = None
        self.loading = False
        self.error: Optional[str] = None

    def fetch(self) -> Optional[UserSubscription]:
        self.loading = True
        self.error = None
        try:
            row = self.api.get_user_subscription()
            self.subscription = UserSubscription.from_row(row) if row else None
        except FranklinApiError as e:
            logger.error("Error fetching subscription: %s", e)
            self.error = str(e)
        finally:
            self.loading = False
        return self.subscription

    refetch = fetch

    def has_active_subscription(self) -> bool:
        return entitlement.has_active_subscription(self.subscription)

    def is_subscription_canceled(self) -> bool:
        return entitlement.is_subscription_canceled(self.subscription)

    def sync(self) -> Dict[str, Any]:
        result = sync_caller_subscription(self.api)
        logger.info("Subscription synced from Stripe: %s", result.get("status"))
        self.fetch()
        return result
