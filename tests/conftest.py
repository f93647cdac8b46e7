"""Shared fixtures."""

from __future__ import annotations

import asyncio
from typing import Dict, Set

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError

from ocrindex.index.storage import RedisIndexStore


class FakeRedis:
    """In-memory stand-in for the subset of ``redis.asyncio.Redis`` the store uses."""

    def __init__(self) -> None:
        self.strings: Dict[str, str] = {}
        self.sets: Dict[str, Set[str]] = {}
        self.fail_keys: Set[str] = set()
        self.reachable = True
        self.closed = False
        self.calls: list[tuple[str, str]] = []

    def _check(self, operation: str, key: str) -> None:
        self.calls.append((operation, key))
        if not self.reachable:
            raise RedisConnectionError("Connection refused")
        if key in self.fail_keys:
            raise RedisError(f"{operation} rejected")

    async def ping(self) -> bool:
        if not self.reachable:
            raise RedisConnectionError("Connection refused")
        return True

    async def sadd(self, key: str, *members: str) -> int:
        self._check("sadd", key)
        bucket = self.sets.setdefault(key, set())
        added = len(set(members) - bucket)
        bucket.update(members)
        return added

    async def smembers(self, key: str) -> Set[str]:
        self._check("smembers", key)
        return set(self.sets.get(key, set()))

    async def get(self, key: str) -> str | None:
        self._check("get", key)
        return self.strings.get(key)

    async def set(self, key: str, value: str) -> bool:
        self._check("set", key)
        self.strings[key] = value
        return True

    async def aclose(self) -> None:
        self.closed = True


class CallGate:
    """Holds every gated call until `expected` of them are in flight at once."""

    def __init__(self, expected: int) -> None:
        self.expected = expected
        self.started = 0
        self.completed = 0
        self.in_flight_when_opened = 0
        self._opened: asyncio.Event | None = None

    async def enter(self) -> None:
        if self._opened is None:
            self._opened = asyncio.Event()
        self.started += 1
        if self.started == self.expected:
            self.in_flight_when_opened = self.started - self.completed
            self._opened.set()
        await self._opened.wait()


class GatedRedis(FakeRedis):
    """FakeRedis whose commands suspend at a shared gate before running."""

    def __init__(self, gate: CallGate) -> None:
        super().__init__()
        self.gate = gate
        # Extra latency for commands that succeed.
        self.delay = 0.0

    async def _pass_gate(self, key: str) -> None:
        await self.gate.enter()
        if key not in self.fail_keys:
            await asyncio.sleep(self.delay)

    async def sadd(self, key: str, *members: str) -> int:
        await self._pass_gate(key)
        result = await super().sadd(key, *members)
        self.gate.completed += 1
        return result

    async def smembers(self, key: str) -> Set[str]:
        await self._pass_gate(key)
        result = await super().smembers(key)
        self.gate.completed += 1
        return result

    async def set(self, key: str, value: str) -> bool:
        await self._pass_gate(key)
        result = await super().set(key, value)
        self.gate.completed += 1
        return result


@pytest.fixture
def token_client() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def docs_client() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def store(token_client: FakeRedis, docs_client: FakeRedis) -> RedisIndexStore:
    return RedisIndexStore(token_client, docs_client)


@pytest.fixture
def gated_store():
    """Build a store whose commands only run once `expected` of them are pending."""

    def _build(expected: int):
        gate = CallGate(expected)
        return RedisIndexStore(GatedRedis(gate), GatedRedis(gate)), gate

    return _build
