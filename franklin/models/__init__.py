from franklin.models.customer import StripeCustomer
from franklin.models.subscription import StripeSubscription, SubscriptionStatus

__all__ = [
    "StripeCustomer",
    "StripeSubscription",
    "SubscriptionStatus",
]
