from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from persistence.paths import default_data_dir


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    # Persistence
    data_dir: Path

    # JWT
    jwt_secret: str
    jwt_alg: str
    token_ttl_seconds: int

    # Listing
    default_page_limit: int

    # Debug
    debug_log_tokens: bool
    debug_log_requests: bool


def get_settings() -> Settings:
    data_dir = Path(os.getenv("DATA_DIR") or default_data_dir())

    # NOTE: default is insecure; set JWT_SECRET in production
    jwt_secret = os.getenv("JWT_SECRET", "dev-only-super-secret")
    jwt_alg = os.getenv("JWT_ALG", "HS256")
    token_ttl_seconds = _env_int("TOKEN_TTL_SECONDS", 60 * 60)

    default_page_limit = max(1, _env_int("DEFAULT_PAGE_LIMIT", 30))

    debug_log_tokens = _env_bool("DEBUG_LOG_TOKENS", False)
    debug_log_requests = _env_bool("DEBUG_LOG_REQUESTS", False)

    return Settings(
        data_dir=data_dir,
        jwt_secret=jwt_secret,
        jwt_alg=jwt_alg,
        token_ttl_seconds=token_ttl_seconds,
        default_page_limit=default_page_limit,
        debug_log_tokens=debug_log_tokens,
        debug_log_requests=debug_log_requests,
    )
