"""
Subscription reconciliation.
Re-reads a customer's subscriptions from Stripe, picks the one that matters and
overwrites the cached stripe_subscriptions row with it.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

import stripe
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from franklin.models.subscription import StripeSubscription, SubscriptionStatus

logger = logging.getLogger(__name__)

# Earlier entries win when a customer has several subscriptions
STATUS_PRIORITY = (
    SubscriptionStatus.ACTIVE.value,
    SubscriptionStatus.TRIALING.value,
    SubscriptionStatus.PAST_DUE.value,
    SubscriptionStatus.INCOMPLETE.value,
    SubscriptionStatus.CANCELED.value,
    SubscriptionStatus.UNPAID.value,
)

SYNC_SUBSCRIPTION_LIMIT = 5


def stripe_field(obj: Any, name: str) -> Any:
    """Read a field from a Stripe object or plain dict. Bare ID strings have no fields."""
    if obj is None or isinstance(obj, str):
        return None
    getter = getattr(obj, "get", None)
    if callable(getter):
        return getter(name)
    return getattr(obj, name, None)


def list_customer_subscriptions(customer_id: str, limit: int = SYNC_SUBSCRIPTION_LIMIT) -> List[Any]:
    """All of the customer's subscriptions in any status, with payment methods expanded."""
    subscriptions = stripe.Subscription.list(
        customer=customer_id,
        limit=limit,
        status="all",
        expand=["data.default_payment_method"],
    )
    return list(stripe_field(subscriptions, "data") or [])


def select_subscription(subscriptions: Sequence[Any]) -> Optional[Any]:
    if not subscriptions:
        return None
    for wanted in STATUS_PRIORITY:
        for subscription in subscriptions:
            if stripe_field(subscription, "status") == wanted:
                return subscription
    # Nothing in the priority list (e.g. paused); keep Stripe's ordering
    return subscriptions[0]


def _first_item(subscription: Any) -> Any:
    items = stripe_field(stripe_field(subscription, "items"), "data") or []
    return items[0] if items else None


def _period_bound(subscription: Any, name: str) -> Optional[int]:
    # Newer Stripe API versions moved the billing period onto the subscription items
    value = stripe_field(subscription, name)
    if value is None:
        value = stripe_field(_first_item(subscription), name)
    return value


def build_subscription_record(customer_id: str, subscription: Optional[Any]) -> Dict[str, Any]:
    """Full replacement row for stripe_subscriptions. None means the customer has no subscriptions."""
    record: Dict[str, Any] = {
        "customer_id": customer_id,
        "subscription_id": None,
        "price_id": None,
        "current_period_start": None,
        "current_period_end": None,
        "cancel_at_period_end": False,
        "payment_method_brand": None,
        "payment_method_last4": None,
        "status": SubscriptionStatus.NOT_STARTED.value,
        "updated_at": datetime.now(timezone.utc),
    }
    if subscription is None:
        return record

    record.update({
        "subscription_id": stripe_field(subscription, "id"),
        "price_id": stripe_field(stripe_field(_first_item(subscription), "price"), "id"),
        "current_period_start": _period_bound(subscription, "current_period_start"),
        "current_period_end": _period_bound(subscription, "current_period_end"),
        "cancel_at_period_end": bool(stripe_field(subscription, "cancel_at_period_end")),
        "status": stripe_field(subscription, "status"),
    })

    # Only an expanded payment method carries card details; a bare "pm_..." ID does not
    card = stripe_field(stripe_field(subscription, "default_payment_method"), "card")
    if card is not None:
        record["payment_method_brand"] = stripe_field(card, "brand")
        record["payment_method_last4"] = stripe_field(card, "last4")

    return record


def upsert_subscription_record(db: Session, record: Dict[str, Any]) -> None:
    """Insert or overwrite the customer's row in a single statement keyed on customer_id."""
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        insert = pg_insert
    elif dialect == "sqlite":
        insert = sqlite_insert
    else:
        raise RuntimeError(f"Upsert not supported for database dialect: {dialect}")

    stmt = insert(StripeSubscription).values(**record)
    stmt = stmt.on_conflict_do_update(
        index_elements=[StripeSubscription.customer_id],
        set_={key: stmt.excluded[key] for key in record if key != "customer_id"},
    )
    try:
        db.execute(stmt)
        db.commit()
    except Exception:
        db.rollback()
        raise


def sync_customer_subscription(db: Session, customer_id: str) -> Dict[str, Any]:
    """
    Reconcile one customer with Stripe and return the record that was written.
    Ownership of customer_id must already have been checked by the caller.
    Stripe and database errors propagate; there is no retry.
    """
    subscriptions = list_customer_subscriptions(customer_id)
    logger.info("Found %d subscriptions for customer %s", len(subscriptions), customer_id)

    selected = select_subscription(subscriptions)
    record = build_subscription_record(customer_id, selected)
    upsert_subscription_record(db, record)

    if selected is None:
        logger.info("No subscriptions for customer %s, marked not_started", customer_id)
    else:
        logger.info(
            "✅ Synced subscription %s with status %s (selected from %d)",
            record["subscription_id"], record["status"], len(subscriptions)
        )
    return record
