import os
import time

# Configure the app before anything imports franklin.db.session
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SUPABASE_JWT_SECRET"] = "franklin-test-jwt-secret-at-least-32-bytes-long"
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_dummy_key_for_testing")

import jwt
import pytest
from fastapi.testclient import TestClient

from franklin.db.base import Base
from franklin.db.session import SessionLocal, engine
from franklin.main import app
from franklin.models import StripeCustomer

USER_ID = "8d4c2a8e-5b7f-4c43-9d1e-3f2a1b0c9e77"
OTHER_USER_ID = "0f9e8d7c-6b5a-4f3e-8d2c-1b0a9f8e7d6c"
CUSTOMER_ID = "cus_owner123"
OTHER_CUSTOMER_ID = "cus_someone_else"
PRICE_ID = "price_1RhCiGJteaQNzOZDgzrK6ws0"


def make_token(user_id=USER_ID, email="jamie@example.com", secret=None, expires_in=3600,
               audience="authenticated"):
    payload = {
        "email": email,
        "aud": audience,
        "role": "authenticated",
        "exp": int(time.time()) + expires_in,
    }
    if user_id is not None:
        payload["sub"] = user_id
    return jwt.encode(payload, secret or os.environ["SUPABASE_JWT_SECRET"], algorithm="HS256")


def make_subscription(sub_id, status, price_id=PRICE_ID, period_start=1760000000,
                      period_end=1762592000, cancel_at_period_end=False, payment_method=None):
    """Stripe subscription as returned by Subscription.list, as a plain dict."""
    return {
        "id": sub_id,
        "object": "subscription",
        "status": status,
        "current_period_start": period_start,
        "current_period_end": period_end,
        "cancel_at_period_end": cancel_at_period_end,
        "default_payment_method": payment_method,
        "items": {"data": [{"id": f"si_{sub_id}", "price": {"id": price_id}}]},
        "metadata": {},
    }


@pytest.fixture(autouse=True)
def db_tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client():
    """A test client for the app. Startup hooks (migrations) are not run."""
    return TestClient(app)


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def customer(db):
    """The signed-in user's Stripe customer, plus a customer owned by someone else."""
    own = StripeCustomer(user_id=USER_ID, customer_id=CUSTOMER_ID)
    db.add(own)
    db.add(StripeCustomer(user_id=OTHER_USER_ID, customer_id=OTHER_CUSTOMER_ID))
    db.commit()
    return own
