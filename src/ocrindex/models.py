"""Core ocrindex data models."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path


class ProcessedState(enum.Enum):
    """Whether a document has been through text detection."""

    NOT_PROCESSED = "not_processed"
    PROCESSED_WITH_TEXT = "processed_with_text"
    PROCESSED_NO_TEXT = "processed_no_text"

    @property
    def is_processed(self) -> bool:
        return self is not ProcessedState.NOT_PROCESSED


@dataclass(slots=True)
class TextDetection:
    """Text detection outcome for one image."""

    path: Path
    text: str = ""
    has_text: bool = False
    error: str | None = None

    @property
    def document_id(self) -> str:
        return str(self.path)
