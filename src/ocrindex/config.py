"""Application configuration defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 6379
TOKEN_DB = 0
DOCS_DB = 1
# Synchronous batchAnnotateImages accepts at most 16 images per request.
DEFAULT_BATCH_SIZE = 16


def _get_default_host() -> str:
    return os.environ.get("REDIS_HOST") or DEFAULT_HOST


def _get_default_port() -> int:
    raw = os.environ.get("REDIS_PORT")
    if not raw:
        return DEFAULT_PORT
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid REDIS_PORT value: {raw!r}") from exc


@dataclass(slots=True)
class AppConfig:
    redis_host: str = field(default_factory=_get_default_host)
    redis_port: int = field(default_factory=_get_default_port)
    token_db: int = TOKEN_DB
    docs_db: int = DOCS_DB
    lowercase_tokens: bool = False
    batch_size: int = DEFAULT_BATCH_SIZE

    def __post_init__(self) -> None:
        if not 0 < self.redis_port < 65536:
            raise ValueError(f"Port out of range: {self.redis_port}")
        if self.token_db == self.docs_db:
            raise ValueError("Token and document databases must differ")
        if self.batch_size < 1:
            raise ValueError("batch_size must be positive")
