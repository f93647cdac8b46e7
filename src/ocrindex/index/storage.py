"""Redis-backed inverted index and processed-document tracker."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Set

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from ocrindex.config import AppConfig
from ocrindex.errors import StoreConnectionError, StoreOperationError

LOGGER = logging.getLogger(__name__)


class RedisIndexStore:
    """Persistence layer for token postings and processed documents.

    Two logical databases are used: the token database maps every token to
    the set of document identifiers containing it, the documents database maps
    every processed document identifier to its extracted text (empty when the
    image had no text).
    """

    def __init__(self, token_client: aioredis.Redis, docs_client: aioredis.Redis) -> None:
        self.token_client = token_client
        self.docs_client = docs_client

    @classmethod
    def from_config(cls, config: AppConfig) -> "RedisIndexStore":
        def _client(db: int) -> aioredis.Redis:
            return aioredis.Redis(
                host=config.redis_host,
                port=config.redis_port,
                db=db,
                decode_responses=True,
            )

        return cls(_client(config.token_db), _client(config.docs_db))

    async def ping(self) -> bool:
        """Check both connections, logging failures instead of raising."""
        ok = True
        for name, client in (("tokens", self.token_client), ("documents", self.docs_client)):
            try:
                await client.ping()
            except RedisError as exc:
                error = StoreConnectionError(f"{name} store unreachable: {exc}")
                LOGGER.error("ERR:REDIS: %s", error)
                ok = False
        return ok

    async def close(self) -> None:
        await self.token_client.aclose()
        await self.docs_client.aclose()

    async def add_posting(self, token: str, document_id: str) -> None:
        try:
            await self.token_client.sadd(token, document_id)
        except RedisError as exc:
            raise StoreOperationError("SADD", token, str(exc)) from exc

    async def postings(self, token: str) -> Set[str]:
        try:
            members = await self.token_client.smembers(token)
        except RedisError as exc:
            raise StoreOperationError("SMEMBERS", token, str(exc)) from exc
        return set(members)

    async def get_document(self, document_id: str) -> str | None:
        try:
            return await self.docs_client.get(document_id)
        except RedisError as exc:
            raise StoreOperationError("GET", document_id, str(exc)) from exc

    async def set_document(self, document_id: str, text: str) -> None:
        try:
            await self.docs_client.set(document_id, text)
        except RedisError as exc:
            raise StoreOperationError("SET", document_id, str(exc)) from exc


@asynccontextmanager
async def open_store(config: AppConfig) -> AsyncIterator[RedisIndexStore]:
    """Open a store for the duration of a block and always release it."""
    store = RedisIndexStore.from_config(config)
    try:
        LOGGER.debug(
            "Connecting to redis at %s:%s (tokens db %s, documents db %s)",
            config.redis_host,
            config.redis_port,
            config.token_db,
            config.docs_db,
        )
        await store.ping()
        yield store
    finally:
        await store.close()
