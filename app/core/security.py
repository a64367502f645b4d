import hashlib
from dataclasses import dataclass
from typing import Any

import jwt
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from app.core.config import get_settings
from app.core.exceptions import UnauthorizedError

SESSION_MAX_AGE = 7 * 24 * 3600  # 7 days


@dataclass(frozen=True)
class Identity:
    """Caller identity as asserted by the identity provider."""

    clerk_id: str
    email: str = ""
    name: str = ""
    avatar_url: str | None = None


def get_session_serializer() -> URLSafeTimedSerializer:
    settings = get_settings()
    return URLSafeTimedSerializer(
        settings.secret_key,
        salt="canvix-session",
        signer_kwargs={"key_derivation": "hmac", "digest_method": hashlib.sha256},
    )


def create_session_cookie(payload: dict[str, Any]) -> str:
    return get_session_serializer().dumps(payload)


def load_session_cookie(cookie_value: str, max_age_seconds: int = SESSION_MAX_AGE) -> dict[str, Any] | None:
    try:
        return get_session_serializer().loads(cookie_value, max_age=max_age_seconds)
    except (BadSignature, SignatureExpired):
        return None


def identity_from_token(token: str) -> Identity:
    """Verify a Clerk session token and map its claims to an Identity."""
    settings = get_settings()
    if not settings.clerk_jwt_key:
        raise UnauthorizedError("Identity provider not configured")
    options = {"require": ["sub", "exp"], "verify_aud": False}
    try:
        claims = jwt.decode(
            token,
            settings.clerk_jwt_key,
            algorithms=[settings.clerk_jwt_algorithm],
            issuer=settings.clerk_issuer,
            options=options,
        )
    except jwt.PyJWTError as e:
        raise UnauthorizedError("Invalid or expired session token") from e
    return Identity(
        clerk_id=claims["sub"],
        email=claims.get("email") or "",
        name=(claims.get("name") or "").strip(),
        avatar_url=claims.get("picture"),
    )
