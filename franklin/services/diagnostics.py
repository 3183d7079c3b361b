"""
Read-only Stripe snapshot for support triage.
Nothing here writes to the database.
"""
from collections.abc import Mapping
from typing import Any, Dict, List

import stripe

from franklin.services.subscription_sync import stripe_field

DEBUG_SUBSCRIPTION_LIMIT = 10
DEBUG_INVOICE_LIMIT = 5
DEBUG_PAYMENT_METHOD_LIMIT = 5


def to_plain(value: Any) -> Any:
    """Convert Stripe objects (and anything nested in them) to JSON-ready dicts and lists."""
    if hasattr(value, "to_dict") and not isinstance(value, dict):
        value = value.to_dict()
    if isinstance(value, Mapping):
        return {key: to_plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(item) for item in value]
    return value


def _metadata_flag(obj: Any, key: str) -> bool:
    return stripe_field(stripe_field(obj, "metadata"), key) == "true"


def analyze_provider_snapshot(customer: Any, subscriptions: List[Any]) -> Dict[str, bool]:
    """Support flags derived straight from Stripe data, independent of the cached rows."""
    has_active = any(
        stripe_field(sub, "status") in ("active", "trialing") for sub in subscriptions
    )

    is_promo = _metadata_flag(customer, "promo") or any(
        stripe_field(stripe_field(stripe_field(sub, "discount"), "coupon"), "percent_off") == 100
        for sub in subscriptions
    )

    email = stripe_field(customer, "email") or ""
    is_beta = (
        _metadata_flag(customer, "beta")
        or "beta" in email
        or any(stripe_field(stripe_field(sub, "metadata"), "type") == "beta" for sub in subscriptions)
    )

    return {
        "has_active_subscription": has_active,
        "is_promo_customer": is_promo,
        "is_beta_customer": is_beta,
    }


def fetch_provider_snapshot(customer_id: str) -> Dict[str, Any]:
    """Live customer, subscriptions, invoices and payment methods from Stripe, plus analysis."""
    customer = stripe.Customer.retrieve(customer_id)
    subscriptions = stripe.Subscription.list(
        customer=customer_id,
        limit=DEBUG_SUBSCRIPTION_LIMIT,
        status="all",
        expand=["data.default_payment_method"],
    )
    invoices = stripe.Invoice.list(customer=customer_id, limit=DEBUG_INVOICE_LIMIT)
    payment_methods = stripe.PaymentMethod.list(customer=customer_id, limit=DEBUG_PAYMENT_METHOD_LIMIT)

    subscription_list = list(stripe_field(subscriptions, "data") or [])
    return {
        "customer": to_plain(customer),
        "subscriptions": to_plain(subscription_list),
        "invoices": to_plain(list(stripe_field(invoices, "data") or [])),
        "payment_methods": to_plain(list(stripe_field(payment_methods, "data") or [])),
        "analysis": analyze_provider_snapshot(customer, subscription_list),
    }
