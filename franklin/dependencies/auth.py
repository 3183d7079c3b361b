import logging
import os
from dataclasses import dataclass
from typing import Dict, Optional

import jwt  # PyJWT
from fastapi import Header, HTTPException, status

logger = logging.getLogger(__name__)

# One PyJWKClient per Supabase project; the client caches fetched keys itself
_JWKS_CLIENTS: Dict[str, jwt.PyJWKClient] = {}
JWKS_CACHE_TTL = 3600  # Cache keys for 1 hour


@dataclass(frozen=True)
class AuthenticatedUser:
    id: str  # Supabase user id (sub claim)
    email: Optional[str] = None


def get_jwks_client(supabase_url: str) -> jwt.PyJWKClient:
    client = _JWKS_CLIENTS.get(supabase_url)
    if client is None:
        jwks_url = f"{supabase_url.rstrip('/')}/auth/v1/.well-known/jwks.json"
        logger.info("[AUTH] Creating JWKS client for %s", jwks_url)
        client = jwt.PyJWKClient(jwks_url, cache_keys=True, lifespan=JWKS_CACHE_TTL)
        _JWKS_CLIENTS[supabase_url] = client
    return client


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def _extract_bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise _unauthorized("Missing authorization header")

    if not authorization.startswith("Bearer "):
        raise _unauthorized("Invalid header format. Expected 'Bearer <token>'")

    token = authorization.replace("Bearer ", "", 1).strip()

    # Clients without a session send these literally
    if not token or token.lower() in ["null", "undefined", "none"]:
        raise _unauthorized("Missing token")

    if len(token.split(".")) != 3:
        raise _unauthorized("Invalid token format. Token must have header.payload.signature structure.")

    return token


def verify_supabase_token(token: str) -> dict:
    """
    Verify a Supabase access token and return its claims.
    Supports HS256 (project JWT secret) and ES256/RS256 (project JWKS).
    """
    try:
        unverified_header = jwt.get_unverified_header(token)
    except jwt.DecodeError as e:
        logger.warning("[AUTH] Failed to decode token header: %s", e)
        raise _unauthorized("Invalid token header")

    algo = unverified_header.get("alg")

    if algo == "HS256":
        secret = os.getenv("SUPABASE_JWT_SECRET")
        if not secret:
            logger.error("[AUTH] SUPABASE_JWT_SECRET is missing in environment variables")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Server misconfiguration: SUPABASE_JWT_SECRET not set"
            )
        key = secret
    elif algo in ("ES256", "RS256"):
        supabase_url = os.getenv("SUPABASE_URL")
        if not supabase_url:
            logger.error("[AUTH] SUPABASE_URL is missing for %s verification", algo)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Server misconfiguration: SUPABASE_URL not set"
            )
        try:
            key = get_jwks_client(supabase_url).get_signing_key_from_jwt(token).key
        except jwt.PyJWKClientError as e:
            logger.error("[AUTH] Could not resolve signing key from JWKS: %s", e)
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Authentication service temporarily unavailable. Please try again in a moment."
            )
    else:
        logger.warning("[AUTH] Unsupported algorithm: %s", algo)
        raise _unauthorized(f"Unsupported token algorithm: {algo}")

    try:
        # Decode and verify in one step; callers only ever see verified claims
        return jwt.decode(
            token,
            key,
            algorithms=[algo],
            audience="authenticated",
            options={"verify_aud": True}
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.InvalidTokenError as e:
        logger.warning("[AUTH] %s verification failed: %s", algo, e)
        raise _unauthorized("Failed to authenticate user")


def get_current_user(authorization: Optional[str] = Header(None)) -> AuthenticatedUser:
    """FastAPI dependency: verified caller identity from the Authorization header."""
    token = _extract_bearer_token(authorization)
    payload = verify_supabase_token(token)

    user_id = payload.get("sub")
    if not user_id:
        raise _unauthorized("Token missing user ID claim")

    return AuthenticatedUser(id=user_id, email=payload.get("email"))
