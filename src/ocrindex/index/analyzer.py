"""Directory analysis: detect text in new images and index it."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from ocrindex.errors import StoreOperationError
from ocrindex.index.indexer import Indexer
from ocrindex.models import TextDetection
from ocrindex.utils.aio import gather_all
from ocrindex.utils.files import iter_file_paths
from ocrindex.vision.annotator import ImageAnnotator

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class AnalyzeStats:
    indexed: int = 0
    no_text: int = 0
    skipped: int = 0
    failed: int = 0
    processed_files: list[Path] = field(default_factory=list)

    def increment(self, status: str, path: Path) -> None:
        if status == "indexed":
            self.indexed += 1
        elif status == "no_text":
            self.no_text += 1
        elif status == "skipped":
            self.skipped += 1
        else:
            self.failed += 1
        self.processed_files.append(path)


class Analyzer:
    """Coordinates text detection and index updates for a directory."""

    def __init__(self, indexer: Indexer, annotator: ImageAnnotator) -> None:
        self.indexer = indexer
        self.annotator = annotator

    async def pending_files(self, paths: List[Path], stats: AnalyzeStats) -> List[Path]:
        """Return the paths that have not been analysed yet."""
        states = await gather_all(*(self.indexer.is_processed(str(path)) for path in paths))
        pending = []
        for path, state in zip(paths, states):
            if state.is_processed:
                stats.increment("skipped", path)
            else:
                pending.append(path)
        return pending

    async def analyze(self, directory: Path) -> AnalyzeStats:
        """Detect text in every unprocessed file of ``directory`` and index it."""
        stats = AnalyzeStats()
        paths = list(iter_file_paths(directory))
        if not paths:
            LOGGER.warning("No files found in %s", directory)
            return stats

        pending = await self.pending_files(paths, stats)
        if not pending:
            LOGGER.info("All %d file(s) already processed", len(paths))
            return stats

        async for detections in self.annotator.iter_batches(pending):
            statuses = await gather_all(*(self._record(detection) for detection in detections))
            for detection, status in zip(detections, statuses):
                stats.increment(status, detection.path)
        return stats

    async def _record(self, detection: TextDetection) -> str:
        if detection.error is not None:
            LOGGER.error("API Error for %s: %s", detection.path, detection.error)
            return "failed"

        try:
            if detection.has_text:
                await self.indexer.add(detection.document_id, detection.text)
                return "indexed"
            LOGGER.info("%s had no discernable text.", detection.path)
            await self.indexer.mark_no_text(detection.document_id)
            return "no_text"
        except StoreOperationError as exc:
            LOGGER.error("Failed to record %s: %s", detection.path, exc)
            return "failed"
