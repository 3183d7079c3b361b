"""
Support snapshot of everything the app can see about the user's billing state.
"""
import logging
from typing import Any, Callable, Dict, Optional

from franklin.client.api import FranklinApiClient, FranklinApiError
from franklin.client.subscription import sync_caller_subscription

logger = logging.getLogger(__name__)


def _section(read: Callable[[], Any]) -> Dict[str, Any]:
    # Each section records its own failure so one bad read doesn't hide the rest
    try:
        return {"data": read(), "error": None}
    except FranklinApiError as e:
        return {"data": None, "error": str(e)}


class SubscriptionDiagnostics:
    def __init__(self, api: FranklinApiClient):
        self.api = api
        self.last_snapshot: Optional[Dict[str, Any]] = None

    def run(self) -> Dict[str, Any]:
        if not self.api.access_token:
            raise FranklinApiError("Not authenticated")

        snapshot: Dict[str, Any] = {
            "customers": _section(self.api.get_customers),
            "subscriptions": _section(self.api.get_subscriptions),
            "user_subscriptions": _section(
                lambda: [row for row in [self.api.get_user_subscription()] if row]
            ),
        }

        customers = snapshot["customers"]["data"] or []
        test_customer = {"customer_id": customers[0]["customer_id"]} if customers else None
        snapshot["test_customer"] = {"data": test_customer, "error": snapshot["customers"]["error"]}

        if test_customer:
            customer_id = test_customer["customer_id"]
            snapshot["test_subscription"] = _section(lambda: next(
                (row for row in self.api.get_subscriptions() if row["customer_id"] == customer_id),
                None,
            ))
            try:
                snapshot["stripe_data"] = self.api.debug_stripe_customer(customer_id)
            except FranklinApiError as e:
                logger.warning("Stripe debug fetch failed for %s: %s", customer_id, e)
                snapshot["stripe_data"] = {"error": f"Stripe fetch error: {e}"}

        self.last_snapshot = snapshot
        return snapshot

    def fix_subscription_status(self) -> Dict[str, Any]:
        """Re-sync from Stripe, then return a fresh snapshot. Raises SubscriptionSyncError on failure."""
        sync_caller_subscription(self.api)
        return self.run()
