"""Pixlr editor embed tokens."""

from typing import Callable

import jwt

from app.core.config import Settings, get_settings
from app.core.exceptions import InternalError
from app.core.logging import get_logger

log = get_logger(__name__)

TokenIssuer = Callable[[], str]


def issue_editor_token(settings: Settings | None = None) -> str:
    """Sign an embedded-mode token that lets the browser open the hosted editor."""
    settings = settings or get_settings()
    if not settings.pixlr_api_secret:
        log.error("editor_token_unavailable", reason="PIXLR_API_SECRET not set")
        raise InternalError("Editor is not configured")
    payload = {
        "sub": settings.pixlr_api_key,
        "mode": "embedded",
        "origin": settings.app_url,
        "settings": {
            "referrer": settings.editor_referrer,
            "accent": settings.editor_accent,
            "workspace": settings.editor_workspace,
            "tabLimit": settings.editor_tab_limit,
        },
    }
    return jwt.encode(payload, settings.pixlr_api_secret, algorithm="HS256")


def get_token_issuer() -> TokenIssuer:
    """Dependency: the issuer used by POST /editor/token."""
    return issue_editor_token
