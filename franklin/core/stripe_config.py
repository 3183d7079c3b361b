from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class StripeProduct:
    id: str
    price_id: str
    name: str
    description: str
    mode: str  # "payment" or "subscription"
    price: float
    currency: str
    interval: Optional[str] = None  # "month" or "year" for subscriptions


# Products offered in the app. Price IDs must match the Stripe dashboard.
STRIPE_PRODUCTS: List[StripeProduct] = [
    StripeProduct(
        id="prod_ScRbJ6ZECew9FE",
        price_id="price_1RhCiGJteaQNzOZDgzrK6ws0",
        name="Franklin",
        description=(
            "Transform your identity goals into daily actions. Franklin helps you break down "
            "12-week outcomes into daily micro-steps, with morning planning and evening "
            "reflection to keep you on track."
        ),
        mode="subscription",
        price=9.99,
        currency="usd",
        interval="month",
    ),
]


def get_product_by_id(product_id: str) -> Optional[StripeProduct]:
    return next((p for p in STRIPE_PRODUCTS if p.id == product_id), None)


def get_product_by_price_id(price_id: Optional[str]) -> Optional[StripeProduct]:
    """Look up the catalog entry for a Stripe price ID."""
    if not price_id:
        return None
    return next((p for p in STRIPE_PRODUCTS if p.price_id == price_id), None)
