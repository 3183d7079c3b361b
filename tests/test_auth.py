import pytest
from fastapi import HTTPException

from franklin.dependencies.auth import get_current_user
from tests.conftest import USER_ID, make_token


class TestGetCurrentUser:
    """Supabase bearer token verification."""

    def test_valid_hs256_token(self):
        user = get_current_user(f"Bearer {make_token()}")
        assert user.id == USER_ID
        assert user.email == "jamie@example.com"

    @pytest.mark.parametrize("header", [
        None,
        "",
        "Token abc",
        "Bearer ",
        "Bearer null",
        "Bearer undefined",
        "Bearer not-a-jwt",
    ])
    def test_malformed_headers_are_401(self, header):
        with pytest.raises(HTTPException) as exc_info:
            get_current_user(header)
        assert exc_info.value.status_code == 401

    def test_expired_token_is_401(self):
        with pytest.raises(HTTPException) as exc_info:
            get_current_user(f"Bearer {make_token(expires_in=-60)}")
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Token has expired"

    def test_wrong_audience_is_401(self):
        with pytest.raises(HTTPException) as exc_info:
            get_current_user(f"Bearer {make_token(audience='anon')}")
        assert exc_info.value.status_code == 401

    def test_wrong_secret_is_401(self):
        token = make_token(secret="another-secret-that-is-also-long-enough-for-hs256")
        with pytest.raises(HTTPException) as exc_info:
            get_current_user(f"Bearer {token}")
        assert exc_info.value.status_code == 401

    def test_token_without_subject_is_401(self):
        with pytest.raises(HTTPException) as exc_info:
            get_current_user(f"Bearer {make_token(user_id=None)}")
        assert exc_info.value.status_code == 401

    def test_missing_secret_is_server_error(self, monkeypatch):
        token = make_token()
        monkeypatch.delenv("SUPABASE_JWT_SECRET")
        with pytest.raises(HTTPException) as exc_info:
            get_current_user(f"Bearer {token}")
        assert exc_info.value.status_code == 500
