"""Shared FastAPI dependencies."""

from fastapi import Request

from app.core.config import get_settings
from app.core.exceptions import UnauthorizedError
from app.core.logging import bind_user_id
from app.core.security import identity_from_token, load_session_cookie
from app.models.user import User
from app.services import users as user_service

SESSION_COOKIE_NAME = "canvix_session"


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_current_user(request: Request) -> User:
    """Resolve the caller: identity token, then session cookie, then the dev user."""
    settings = get_settings()
    token = _bearer_token(request)
    if token:
        user = await user_service.get_or_create_user(identity_from_token(token))
    elif request.cookies.get(SESSION_COOKIE_NAME):
        payload = load_session_cookie(request.cookies[SESSION_COOKIE_NAME])
        if not payload or not payload.get("user_id"):
            raise UnauthorizedError("Invalid or expired session")
        user = await user_service.get_user(payload["user_id"])
        if not user:
            raise UnauthorizedError("User not found")
    elif settings.dev_user_enabled and not settings.identity_provider_configured:
        user = await user_service.get_or_create_dev_user()
    else:
        raise UnauthorizedError("Not authenticated")
    bind_user_id(str(user.id))
    return user
