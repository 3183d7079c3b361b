"""
Entitlement policy: does this account get paid access?

Rule (current behaviour, awaiting product-owner review): a user is entitled when
they have a Stripe customer at all, whatever the subscription status. A status
in ENTITLED_STATUSES is a second route to the same answer. This means canceled
and unpaid customers keep access; tests pin that so any change is deliberate.
"""
from typing import Optional

from franklin.models.subscription import SubscriptionStatus

ENTITLED_STATUSES = frozenset({
    SubscriptionStatus.ACTIVE.value,
    SubscriptionStatus.TRIALING.value,
    SubscriptionStatus.PAST_DUE.value,
    SubscriptionStatus.INCOMPLETE.value,
})


def has_active_subscription(subscription: Optional[object]) -> bool:
    if subscription is None:
        return False
    if getattr(subscription, "customer_id", None):
        return True
    return getattr(subscription, "subscription_status", None) in ENTITLED_STATUSES


def is_subscription_canceled(subscription: Optional[object]) -> bool:
    """Scheduled to end at period end. Independent of the current status."""
    if subscription is None:
        return False
    return getattr(subscription, "cancel_at_period_end", False) is True
