from franklin.client.api import FranklinApiClient, FranklinApiError
from franklin.client.diagnostics import SubscriptionDiagnostics
from franklin.client.subscription import (
    SubscriptionSyncError,
    SubscriptionViewModel,
    UserSubscription,
)

__all__ = [
    "FranklinApiClient",
    "FranklinApiError",
    "SubscriptionDiagnostics",
    "SubscriptionSyncError",
    "SubscriptionViewModel",
    "UserSubscription",
]
