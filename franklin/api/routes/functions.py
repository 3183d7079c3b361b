"""
Edge-function style endpoints called by the Franklin app:
subscription sync, Stripe debug snapshot and checkout creation.
Every response, including errors, carries permissive CORS headers.
"""
import logging

import stripe
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from franklin.core.cors import cors_response
from franklin.core.stripe_config import get_product_by_price_id
from franklin.db.session import get_db
from franklin.dependencies.auth import AuthenticatedUser, get_current_user
from franklin.models.customer import StripeCustomer
from franklin.models.subscription import StripeSubscription, SubscriptionStatus
from franklin.schemas.subscription import (
    CheckoutSessionRequest,
    CheckoutSessionResponse,
    CustomerRequest,
    SyncSubscriptionResponse,
)
from franklin.services.diagnostics import fetch_provider_snapshot
from franklin.services.subscription_sync import stripe_field, sync_customer_subscription
from franklin.services.subscription_view import get_customer_for_user, get_owned_customer

logger = logging.getLogger(__name__)

router = APIRouter()


def _require_owned_customer(db: Session, user: AuthenticatedUser, request: CustomerRequest) -> str:
    """Validate the body and check the caller owns the customer. Returns the customer ID."""
    customer_id = (request.customer_id or "").strip()
    if not customer_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="customer_id is required"
        )

    # 404 rather than 403 so other accounts' customer IDs can't be probed
    if not get_owned_customer(db, user.id, customer_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer not found or access denied"
        )
    return customer_id


@router.options("/sync-subscription")
@router.options("/debug-stripe-customer")
@router.options("/stripe-checkout")
def preflight():
    return cors_response(status_code=204)


@router.post("/sync-subscription")
def sync_subscription(
    request: CustomerRequest,
    db: Session = Depends(get_db),
    user: AuthenticatedUser = Depends(get_current_user)
):
    """
    Re-fetch the caller's subscription from Stripe and overwrite the cached row.
    Safe to call repeatedly: the same Stripe state always produces the same row.
    """
    try:
        customer_id = _require_owned_customer(db, user, request)
        record = sync_customer_subscription(db, customer_id)
    except HTTPException:
        raise
    except stripe.StripeError as e:
        logger.error("❌ Stripe error syncing subscription: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.user_message or str(e)
        )
    except SQLAlchemyError as e:
        logger.error("❌ Database error syncing subscription: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update subscription"
        )
    except Exception as e:
        logger.exception("❌ Sync error: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )

    if record["subscription_id"] is None:
        message = "No active subscriptions found"
    else:
        message = "Subscription synced successfully"

    response = SyncSubscriptionResponse(
        success=True,
        message=message,
        status=record["status"],
        subscription_id=record["subscription_id"]
    )
    return cors_response(response.model_dump(exclude_none=True))


@router.post("/debug-stripe-customer")
def debug_stripe_customer(
    request: CustomerRequest,
    db: Session = Depends(get_db),
    user: AuthenticatedUser = Depends(get_current_user)
):
    """Raw Stripe data for the caller's customer, for support. Read-only."""
    try:
        customer_id = _require_owned_customer(db, user, request)
        snapshot = fetch_provider_snapshot(customer_id)
    except HTTPException:
        raise
    except stripe.StripeError as e:
        logger.error("❌ Stripe error in debug snapshot: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.user_message or str(e)
        )
    except Exception as e:
        logger.exception("❌ Debug error: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )

    return cors_response(snapshot)


@router.post("/stripe-checkout")
def create_checkout_session(
    request: CheckoutSessionRequest,
    db: Session = Depends(get_db),
    user: AuthenticatedUser = Depends(get_current_user)
):
    """
    Create a Stripe Checkout Session for one of the catalog prices.
    The first checkout creates the Stripe customer and its not_started subscription row.
    """
    product = get_product_by_price_id(request.price_id)
    if not product:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown price_id: {request.price_id}"
        )
    if product.mode != request.mode:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Price {request.price_id} is only available in {product.mode} mode"
        )

    try:
        customer = get_customer_for_user(db, user.id)
        if not customer:
            stripe_customer = stripe.Customer.create(
                email=user.email,
                metadata={"user_id": user.id}
            )
            customer = StripeCustomer(user_id=user.id, customer_id=stripe_field(stripe_customer, "id"))
            db.add(customer)
            logger.info("Created Stripe customer %s for user %s", customer.customer_id, user.id)

        if request.mode == "subscription":
            existing = db.query(StripeSubscription).filter(
                StripeSubscription.customer_id == customer.customer_id
            ).first()
            if not existing:
                db.add(StripeSubscription(
                    customer_id=customer.customer_id,
                    status=SubscriptionStatus.NOT_STARTED.value
                ))
        db.commit()

        checkout_session = stripe.checkout.Session.create(
            customer=customer.customer_id,
            payment_method_types=["card"],
            line_items=[{"price": request.price_id, "quantity": 1}],
            mode=request.mode,
            success_url=request.success_url,
            cancel_url=request.cancel_url,
            metadata={"user_id": user.id}
        )
    except stripe.StripeError as e:
        db.rollback()
        logger.error("❌ Stripe error creating checkout session: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.user_message or str(e)
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("❌ Database error creating checkout session: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create customer mapping"
        )

    response = CheckoutSessionResponse(
        session_id=stripe_field(checkout_session, "id"),
        url=stripe_field(checkout_session, "url")
    )
    logger.info("✅ Created Stripe Checkout Session %s for user %s", response.session_id, user.id)
    return cors_response(response.model_dump())
