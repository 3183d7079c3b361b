from unittest.mock import MagicMock, patch

import httpx
import pytest

from franklin.client import (
    FranklinApiClient,
    FranklinApiError,
    SubscriptionDiagnostics,
    SubscriptionSyncError,
    SubscriptionViewModel,
)
from franklin.models import StripeSubscription
from tests.conftest import CUSTOMER_ID, make_subscription, make_token


@pytest.fixture
def api(client):
    """Client-side API wrapper talking to the app in-process."""
    return FranklinApiClient(client, access_token=make_token())


def _add_subscription(db, **fields):
    values = {"customer_id": CUSTOMER_ID, "status": "active", "subscription_id": "sub_1"}
    values.update(fields)
    db.add(StripeSubscription(**values))
    db.commit()


class TestFranklinApiClient:

    def test_error_body_becomes_exception(self, client, customer):
        api = FranklinApiClient(client, access_token="bad.token.value")
        with pytest.raises(FranklinApiError) as exc_info:
            api.get_customers()
        assert exc_info.value.status_code == 401

    def test_no_token_fails_before_request(self):
        http = MagicMock()
        with pytest.raises(FranklinApiError):
            FranklinApiClient(http).get_user_subscription()
        http.request.assert_not_called()

    def test_transport_errors_are_wrapped(self):
        http = MagicMock()
        http.request.side_effect = httpx.ConnectError("connection refused")
        with pytest.raises(FranklinApiError):
            FranklinApiClient(http, access_token="x.y.z").get_customers()

    def test_from_env_uses_configured_api_url(self, monkeypatch):
        monkeypatch.setenv("FRANKLIN_API_URL", "https://billing.franklin.app")
        api = FranklinApiClient.from_env("x.y.z")
        try:
            assert api.http.base_url.host == "billing.franklin.app"
            assert api.access_token == "x.y.z"
        finally:
            api.http.close()

    def test_from_env_defaults_to_local_server(self, monkeypatch):
        monkeypatch.delenv("FRANKLIN_API_URL", raising=False)
        api = FranklinApiClient.from_env("x.y.z")
        try:
            assert api.http.base_url.host == "localhost"
            assert api.http.base_url.port == 8000
        finally:
            api.http.close()


class TestSubscriptionViewModel:

    def test_fetch_loads_view_row(self, api, customer, db):
        _add_subscription(db, status="past_due", cancel_at_period_end=True, current_period_end=1762592000)

        model = SubscriptionViewModel(api)
        subscription = model.fetch()

        assert model.loading is False
        assert model.error is None
        assert subscription.customer_id == CUSTOMER_ID
        assert subscription.subscription_status == "past_due"
        assert subscription.product_name is None
        assert model.has_active_subscription() is True
        assert model.is_subscription_canceled() is True

    def test_canceled_customer_still_has_access(self, api, customer, db):
        # Pins the current permissive entitlement rule
        _add_subscription(db, status="canceled")
        model = SubscriptionViewModel(api)
        model.fetch()
        assert model.has_active_subscription() is True
        assert model.is_subscription_canceled() is False

    def test_no_customer_means_no_access(self, api):
        model = SubscriptionViewModel(api)
        assert model.fetch() is None
        assert model.has_active_subscription() is False

    def test_fetch_error_keeps_previous_state(self, api, customer, db):
        _add_subscription(db)
        model = SubscriptionViewModel(api)
        previous = model.fetch()

        api.access_token = make_token(secret="not-the-server-secret-but-still-long-enough")
        assert model.fetch() is previous
        assert model.subscription is previous
        assert model.error
        assert model.loading is False

    def test_sync_calls_function_and_refetches(self, api, customer):
        model = SubscriptionViewModel(api)
        with patch("stripe.Subscription.list", return_value={"data": [make_subscription("sub_9", "trialing")]}):
            result = model.sync()

        assert result["status"] == "trialing"
        assert model.subscription.subscription_id == "sub_9"
        assert model.subscription.subscription_status == "trialing"

    def test_sync_without_customer_raises(self, api):
        with pytest.raises(SubscriptionSyncError, match="No customer record found"):
            SubscriptionViewModel(api).sync()

    def test_sync_failure_raises(self, api, customer):
        import stripe
        with patch("stripe.Subscription.list", side_effect=stripe.APIConnectionError("Stripe is down")):
            with pytest.raises(SubscriptionSyncError, match="Stripe is down"):
                SubscriptionViewModel(api).sync()


class TestSubscriptionDiagnostics:

    def _stripe_patches(self):
        return (
            patch("stripe.Customer.retrieve", return_value={"id": CUSTOMER_ID, "metadata": {}}),
            patch("stripe.Subscription.list", return_value={"data": [make_subscription("sub_1", "active")]}),
            patch("stripe.Invoice.list", return_value={"data": []}),
            patch("stripe.PaymentMethod.list", return_value={"data": []}),
        )

    def test_collects_every_section(self, api, customer, db):
        _add_subscription(db)
        a, b, c, d = self._stripe_patches()
        with a, b, c, d:
            snapshot = SubscriptionDiagnostics(api).run()

        assert [row["customer_id"] for row in snapshot["customers"]["data"]] == [CUSTOMER_ID]
        assert [row["customer_id"] for row in snapshot["subscriptions"]["data"]] == [CUSTOMER_ID]
        assert snapshot["user_subscriptions"]["data"][0]["subscription_status"] == "active"
        assert snapshot["test_customer"]["data"] == {"customer_id": CUSTOMER_ID}
        assert snapshot["test_subscription"]["data"]["subscription_id"] == "sub_1"
        assert snapshot["stripe_data"]["analysis"]["has_active_subscription"] is True

    def test_is_read_only(self, api, customer, db):
        a, b, c, d = self._stripe_patches()
        with a, b, c, d:
            SubscriptionDiagnostics(api).run()
        assert db.query(StripeSubscription).count() == 0

    def test_no_customer_skips_stripe(self, api):
        with patch("stripe.Customer.retrieve") as mock_retrieve:
            snapshot = SubscriptionDiagnostics(api).run()

        assert snapshot["customers"]["data"] == []
        assert snapshot["test_customer"]["data"] is None
        assert "stripe_data" not in snapshot
        mock_retrieve.assert_not_called()

    def test_stripe_failure_is_recorded_not_raised(self, api, customer):
        import stripe
        with patch("stripe.Customer.retrieve", side_effect=stripe.APIConnectionError("boom")):
            snapshot = SubscriptionDiagnostics(api).run()

        assert snapshot["stripe_data"]["error"].startswith("Stripe fetch error:")

    def test_requires_token(self, client):
        with pytest.raises(FranklinApiError):
            SubscriptionDiagnostics(FranklinApiClient(client)).run()

    def test_fix_subscription_status_syncs_then_reruns(self, api, customer, db):
        a, b, c, d = self._stripe_patches()
        with a, b, c, d:
            diagnostics = SubscriptionDiagnostics(api)
            snapshot = diagnostics.fix_subscription_status()

        assert diagnostics.last_snapshot is snapshot
        assert snapshot["test_subscription"]["data"]["status"] == "active"
        db.expire_all()
        assert db.query(StripeSubscription).one().subscription_id == "sub_1"
