"""
Configuration helpers for the contacts backend.

Routers/services never read os.environ directly; they receive a Settings
instance (usually through get_settings()).
"""

from dataclasses import dataclass
from functools import lru_cache
import os

_DEV_JWT_SECRET = "dev-only-secret-change-me"


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    database_url: str
    redis_url: str
    jwt_secret: str
    jwt_algorithm: str
    session_ttl_seconds: int
    log_level: str
    log_json: bool
    cors_origins: tuple[str, ...]

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _bool(value: str | None, default: bool = False) -> bool:
        if value is None:
            return default
        return value.strip().lower() in {"1", "true", "yes", "on"}

    app_env = (os.getenv("APP_ENV") or "dev").lower()
    jwt_secret = os.getenv("JWT_SECRET", "")
    if not jwt_secret:
        if app_env == "prod":
            raise RuntimeError("JWT_SECRET must be configured in production.")
        jwt_secret = _DEV_JWT_SECRET
    origins = tuple(o.strip().rstrip("/") for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip())

    return Settings(
        app_env=app_env,
        database_url=os.getenv("DATABASE_URL", "").strip(),
        redis_url=os.getenv("REDIS_URL", "").strip(),
        jwt_secret=jwt_secret,
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        session_ttl_seconds=max(60, _int(os.getenv("SESSION_TTL_SECONDS", "3600"), 3600)),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        log_json=_bool(os.getenv("LOG_JSON"), app_env == "prod"),
        cors_origins=origins,
    )
