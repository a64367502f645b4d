from functools import lru_cache
from typing import Any, List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_DEFAULT_CORS = ["http://localhost:3000"]


def _parse_cors_origins(v: Any) -> List[str]:
    if v is None or v == "":
        return _DEFAULT_CORS.copy()
    if isinstance(v, list):
        return [x for x in v if isinstance(x, str) and x.strip()]
    s = str(v).strip()
    if not s:
        return _DEFAULT_CORS.copy()
    if s.startswith("["):
        import json
        try:
            out = json.loads(s)
        except ValueError:
            return _DEFAULT_CORS.copy()
        return [x for x in out if isinstance(x, str) and x.strip()] or _DEFAULT_CORS.copy()
    return [x.strip() for x in s.split(",") if x.strip()] or _DEFAULT_CORS.copy()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # App
    env: str = Field(default="development", description="ENV")
    debug: bool = Field(default=False, description="DEBUG")
    secret_key: str = Field(default="change-me-in-production-min-32-chars")
    app_url: str = Field(default="http://localhost:3000", alias="APP_URL")

    # MongoDB
    mongodb_uri: str = Field(default="mongodb://localhost:27017", alias="MONGODB_URI")
    mongodb_db_name: str = Field(default="canvix", alias="MONGODB_DB_NAME")
    # Multi-document transactions need a replica set; standalone servers set this to false
    mongodb_transactions: bool = Field(default=True, alias="MONGODB_TRANSACTIONS")

    # Identity provider (Clerk session tokens)
    clerk_jwt_key: str = Field(default="", alias="CLERK_JWT_KEY")
    clerk_jwt_algorithm: str = Field(default="RS256", alias="CLERK_JWT_ALGORITHM")
    clerk_issuer: str | None = Field(default=None, alias="CLERK_ISSUER")

    # Guest user for local development (only when no identity provider is configured)
    dev_user_enabled: bool = Field(default=True, alias="DEV_USER_ENABLED")
    dev_user_credits: int = Field(default=1000, alias="DEV_USER_CREDITS")

    # Email/password login does not check passwords; see DESIGN.md
    demo_login_enabled: bool = Field(default=True, alias="DEMO_LOGIN_ENABLED")

    # Pixlr editor embedding
    pixlr_api_key: str = Field(default="", alias="PIXLR_API_KEY")
    pixlr_api_secret: str = Field(default="", alias="PIXLR_API_SECRET")
    editor_referrer: str = "Canvix AI"
    editor_accent: str = "purple"
    editor_workspace: str = "dark"
    editor_tab_limit: int = 1

    # Sentry
    sentry_dsn: str | None = Field(default=None, alias="SENTRY_DSN")

    # CORS: env as string, exposed as list
    cors_origins_raw: str = Field(
        default="http://localhost:3000",
        alias="CORS_ORIGINS",
        description="Comma-separated or JSON list",
    )

    @property
    def cors_origins(self) -> List[str]:
        return _parse_cors_origins(getattr(self, "cors_origins_raw", None))

    @property
    def identity_provider_configured(self) -> bool:
        return bool(self.clerk_jwt_key)

    # Credits
    default_credits: int = Field(default=50, alias="DEFAULT_CREDITS")
    credit_history_max_limit: int = 50
    conversation_list_limit: int = 50


@lru_cache
def get_settings() -> Settings:
    return Settings()
