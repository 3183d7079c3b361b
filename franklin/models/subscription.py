import enum
from sqlalchemy import Column, Integer, BigInteger, String, Boolean, DateTime
from sqlalchemy.sql import func
from franklin.db.base import Base


class SubscriptionStatus(str, enum.Enum):
    """Stripe subscription statuses, plus not_started for customers who never subscribed."""
    NOT_STARTED = "not_started"
    ACTIVE = "active"
    TRIALING = "trialing"
    PAST_DUE = "past_due"
    INCOMPLETE = "incomplete"
    INCOMPLETE_EXPIRED = "incomplete_expired"
    CANCELED = "canceled"
    UNPAID = "unpaid"
    PAUSED = "paused"


class StripeSubscription(Base):
    """
    Cached copy of a customer's Stripe subscription.
    Stripe is the source of truth; rows are overwritten whole on every sync.
    """
    __tablename__ = "stripe_subscriptions"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(String, unique=True, nullable=False, index=True)  # Upsert conflict key
    subscription_id = Column(String, nullable=True)
    price_id = Column(String, nullable=True)
    current_period_start = Column(BigInteger, nullable=True)  # Unix seconds
    current_period_end = Column(BigInteger, nullable=True)  # Unix seconds
    cancel_at_period_end = Column(Boolean, default=False, nullable=False)
    payment_method_brand = Column(String, nullable=True)
    payment_method_last4 = Column(String, nullable=True)
    status = Column(String, nullable=False, default=SubscriptionStatus.NOT_STARTED.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now())  # Last reconciled at
    deleted_at = Column(DateTime(timezone=True), nullable=True)
