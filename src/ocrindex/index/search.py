"""Word lookup interface."""

from __future__ import annotations

from typing import List, Sequence, Set

from ocrindex.index.storage import RedisIndexStore
from ocrindex.utils.aio import gather_all


class Searcher:
    """High-level API to query the inverted index."""

    def __init__(self, store: RedisIndexStore) -> None:
        self.store = store

    async def lookup(self, words: Sequence[str]) -> List[Set[str]]:
        """Return, for each word in order, the documents containing it.

        Words are lowercased before querying. Unknown words map to an empty set.
        """
        return await gather_all(*(self.store.postings(word.lower()) for word in words))
