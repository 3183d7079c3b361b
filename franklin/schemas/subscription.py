from pydantic import BaseModel
from typing import Literal, Optional
from datetime import datetime


class CustomerRequest(BaseModel):
    # Optional so a missing value reaches the handler and gets the 400 message
    customer_id: Optional[str] = None


class SyncSubscriptionResponse(BaseModel):
    success: bool
    message: str
    status: str
    subscription_id: Optional[str] = None


class CheckoutSessionRequest(BaseModel):
    price_id: str
    mode: Literal["payment", "subscription"] = "subscription"
    success_url: str
    cancel_url: str


class CheckoutSessionResponse(BaseModel):
    session_id: str
    url: str


class StripeCustomerResponse(BaseModel):
    user_id: str
    customer_id: str
    created_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class StripeSubscriptionResponse(BaseModel):
    customer_id: str
    subscription_id: Optional[str] = None
    status: str
    price_id: Optional[str] = None
    current_period_start: Optional[int] = None  # Unix seconds
    current_period_end: Optional[int] = None  # Unix seconds
    cancel_at_period_end: bool = False
    payment_method_brand: Optional[str] = None
    payment_method_last4: Optional[str] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserSubscriptionResponse(BaseModel):
    """One row of the stripe_user_subscriptions view, scoped to the caller."""
    customer_id: str
    subscription_id: Optional[str] = None
    subscription_status: str
    price_id: Optional[str] = None
    current_period_start: Optional[int] = None
    current_period_end: Optional[int] = None
    cancel_at_period_end: bool = False
    payment_method_brand: Optional[str] = None
    payment_method_last4: Optional[str] = None
    updated_at: Optional[datetime] = None
    product_name: Optional[str] = None
