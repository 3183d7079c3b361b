"""
HTTP client for the Franklin billing backend, used by the app-side view-models.
"""
import os
from typing import Any, Dict, List, Optional

import httpx

DEFAULT_API_URL = "http://localhost:8000"


class FranklinApiError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class FranklinApiClient:
    """Thin wrapper around httpx that adds the Supabase bearer token and unwraps {"error"} bodies."""

    def __init__(self, http: httpx.Client, access_token: Optional[str] = None):
        self.http = http
        self.access_token = access_token

    @classmethod
    def from_env(cls, access_token: Optional[str], base_url: Optional[str] = None) -> "FranklinApiClient":
        base_url = base_url or os.getenv("FRANKLIN_API_URL", DEFAULT_API_URL)
        return cls(httpx.Client(base_url=base_url), access_token)

    def _headers(self) -> Dict[str, str]:
        if not self.access_token:
            raise FranklinApiError("No authentication token available")
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }

    def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        headers = self._headers()
        try:
            response = self.http.request(method, path, headers=headers, json=json)
        except httpx.HTTPError as e:
            raise FranklinApiError(f"Request to {path} failed: {e}") from e

        if response.status_code >= 400:
            try:
                message = response.json().get("error")
            except ValueError:
                message = response.text
            raise FranklinApiError(message or f"HTTP {response.status_code}", status_code=response.status_code)

        return response.json()

    # Caller-scoped table reads

    def get_customers(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/api/stripe/customers")

    def get_subscriptions(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/api/stripe/subscriptions")

    def get_user_subscription(self) -> Optional[Dict[str, Any]]:
        return self._request("GET", "/api/stripe/user-subscription")

    # Functions

    def sync_subscription(self, customer_id: str) -> Dict[str, Any]:
        return self._request("POST", "/functions/v1/sync-subscription", json={"customer_id": customer_id})

    def debug_stripe_customer(self, customer_id: str) -> Dict[str, Any]:
        return self._request("POST", "/functions/v1/debug-stripe-customer", json={"customer_id": customer_id})

    def create_checkout_session(
        self,
        price_id: str,
        success_url: str,
        cancel_url: str,
        mode: str = "subscription",
    ) -> Dict[str, Any]:
        """Returns {"session_id", "url"}; send the user to url to pay."""
        return self._request("POST", "/functions/v1/stripe-checkout", json={
            "price_id": price_id,
            "mode": mode,
            "success_url": success_url,
            "cancel_url": cancel_url,
        })
