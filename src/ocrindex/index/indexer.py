"""Document indexing pipeline."""

from __future__ import annotations

import logging

from ocrindex.index.storage import RedisIndexStore
from ocrindex.models import ProcessedState
from ocrindex.utils.aio import gather_all
from ocrindex.utils.text import tokenize

LOGGER = logging.getLogger(__name__)


class Indexer:
    """Writes extracted text into the inverted index and tracks processed documents."""

    def __init__(self, store: RedisIndexStore, *, lowercase: bool = False) -> None:
        self.store = store
        self.lowercase = lowercase

    async def add(self, document_id: str, text: str) -> None:
        """Post every token of ``text`` for ``document_id`` and store the text.

        All writes run concurrently. Every write is awaited before the first
        failure, if any, is raised; writes that already succeeded are kept.
        """
        tokens = list(dict.fromkeys(tokenize(text, lowercase=self.lowercase)))
        LOGGER.debug("Indexing %s (%d unique tokens)", document_id, len(tokens))

        writes = [self.store.add_posting(token, document_id) for token in tokens]
        writes.append(self.store.set_document(document_id, text))
        await gather_all(*writes)

    async def mark_no_text(self, document_id: str) -> None:
        """Record that ``document_id`` was analysed and holds no text."""
        await self.store.set_document(document_id, "")

    async def is_processed(self, document_id: str) -> ProcessedState:
        value = await self.store.get_document(document_id)
        if value is None:
            return ProcessedState.NOT_PROCESSED
        if value == "":
            LOGGER.info("%s was already checked, and contains no text.", document_id)
            return ProcessedState.PROCESSED_NO_TEXT
        LOGGER.info("%s already added to index.", document_id)
        return ProcessedState.PROCESSED_WITH_TEXT
