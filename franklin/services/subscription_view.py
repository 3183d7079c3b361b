"""
Caller-scoped reads over stripe_customers / stripe_subscriptions.
Every query filters on the authenticated user's id and skips soft-deleted rows.
"""
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from franklin.core.stripe_config import get_product_by_price_id
from franklin.models.customer import StripeCustomer
from franklin.models.subscription import StripeSubscription


def get_owned_customer(db: Session, user_id: str, customer_id: str) -> Optional[StripeCustomer]:
    """The customer row only if it exists, is not deleted and belongs to user_id."""
    return db.query(StripeCustomer).filter(
        StripeCustomer.user_id == user_id,
        StripeCustomer.customer_id == customer_id,
        StripeCustomer.deleted_at.is_(None)
    ).first()


def get_customer_for_user(db: Session, user_id: str) -> Optional[StripeCustomer]:
    return db.query(StripeCustomer).filter(
        StripeCustomer.user_id == user_id,
        StripeCustomer.deleted_at.is_(None)
    ).first()


def list_customers_for_user(db: Session, user_id: str) -> List[StripeCustomer]:
    return db.query(StripeCustomer).filter(
        StripeCustomer.user_id == user_id,
        StripeCustomer.deleted_at.is_(None)
    ).all()


def list_subscriptions_for_user(db: Session, user_id: str) -> List[StripeSubscription]:
    return db.query(StripeSubscription).join(
        StripeCustomer, StripeCustomer.customer_id == StripeSubscription.customer_id
    ).filter(
        StripeCustomer.user_id == user_id,
        StripeCustomer.deleted_at.is_(None),
        StripeSubscription.deleted_at.is_(None)
    ).all()


def get_user_subscription(db: Session, user_id: str) -> Optional[Dict[str, Any]]:
    """
    The stripe_user_subscriptions view row for a user, or None.
    A customer without a subscription row still yields a row (status not_started),
    matching the LEFT JOIN in the SQL view.
    """
    row = db.query(StripeCustomer, StripeSubscription).outerjoin(
        StripeSubscription,
        (StripeSubscription.customer_id == StripeCustomer.customer_id)
        & StripeSubscription.deleted_at.is_(None)
    ).filter(
        StripeCustomer.user_id == user_id,
        StripeCustomer.deleted_at.is_(None)
    ).first()

    if row is None:
        return None

    customer, subscription = row
    if subscription is None:
        return {
            "customer_id": customer.customer_id,
            "subscription_id": None,
            "subscription_status": "not_started",
            "price_id": None,
            "current_period_start": None,
            "current_period_end": None,
            "cancel_at_period_end": False,
            "payment_method_brand": None,
            "payment_method_last4": None,
            "updated_at": None,
            "product_name": None,
        }

    product = get_product_by_price_id(subscription.price_id)
    return {
        "customer_id": customer.customer_id,
        "subscription_id": subscription.subscription_id,
        "subscription_status": subscription.status,
        "price_id": subscription.price_id,
        "current_period_start": subscription.current_period_start,
        "current_period_end": subscription.current_period_end,
        "cancel_at_period_end": bool(subscription.cancel_at_period_end),
        "payment_method_brand": subscription.payment_method_brand,
        "payment_method_last4": subscription.payment_method_last4,
        "updated_at": subscription.updated_at,
        "product_name": product.name if product else None,
    }
