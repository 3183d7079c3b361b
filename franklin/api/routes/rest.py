"""
Caller-scoped reads of the billing tables (what row-level security lets a user see).
"""
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from franklin.db.session import get_db
from franklin.dependencies.auth import AuthenticatedUser, get_current_user
from franklin.schemas.subscription import (
    StripeCustomerResponse,
    StripeSubscriptionResponse,
    UserSubscriptionResponse,
)
from franklin.services.subscription_view import (
    get_user_subscription,
    list_customers_for_user,
    list_subscriptions_for_user,
)

router = APIRouter()


@router.get("/customers", response_model=List[StripeCustomerResponse])
def list_customers(
    db: Session = Depends(get_db),
    user: AuthenticatedUser = Depends(get_current_user)
):
    return list_customers_for_user(db, user.id)


@router.get("/subscriptions", response_model=List[StripeSubscriptionResponse])
def list_subscriptions(
    db: Session = Depends(get_db),
    user: AuthenticatedUser = Depends(get_current_user)
):
    return list_subscriptions_for_user(db, user.id)


@router.get("/user-subscription", response_model=Optional[UserSubscriptionResponse])
def read_user_subscription(
    db: Session = Depends(get_db),
    user: AuthenticatedUser = Depends(get_current_user)
):
    """The reconciled subscription row for the caller, or null."""
    return get_user_subscription(db, user.id)
