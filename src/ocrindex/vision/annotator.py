"""Text detection through the Google Cloud Vision API.

The client authenticates with the service account file named by the
``GOOGLE_APPLICATION_CREDENTIALS`` environment variable.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, List, Sequence

from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud import vision

from ocrindex.config import DEFAULT_BATCH_SIZE, AppConfig
from ocrindex.errors import AnnotationServiceError
from ocrindex.models import TextDetection
from ocrindex.utils.files import read_bytes

LOGGER = logging.getLogger(__name__)


def build_request(path: Path) -> vision.AnnotateImageRequest:
    return vision.AnnotateImageRequest(
        image=vision.Image(content=read_bytes(path)),
        features=[vision.Feature(type_=vision.Feature.Type.TEXT_DETECTION)],
    )


def extract_description(annotations: Sequence[Any]) -> str:
    """Concatenate annotation descriptions in response order."""
    return "".join(annotation.description or "" for annotation in annotations)


def to_detection(path: Path, response: Any) -> TextDetection:
    error = response.error
    if error is not None and error.code:
        return TextDetection(path=path, error=f"{error.code}: {error.message}")

    annotations = list(response.text_annotations)
    return TextDetection(
        path=path,
        text=extract_description(annotations),
        has_text=bool(annotations),
    )


class ImageAnnotator:
    """Submits images to the annotation service in bounded batches."""

    def __init__(self, client: Any | None = None, *, batch_size: int = DEFAULT_BATCH_SIZE) -> None:
        self._client = client
        self.batch_size = batch_size

    @property
    def client(self) -> Any:
        # Created lazily so that it binds to the running event loop.
        if self._client is None:
            try:
                self._client = vision.ImageAnnotatorAsyncClient()
            except GoogleAuthError as exc:
                raise AnnotationServiceError(f"Cannot create Vision client: {exc}") from exc
        return self._client

    async def close(self) -> None:
        """Close the gRPC channel of the client, if one was created."""
        if self._client is not None:
            await self._client.transport.close()

    async def iter_batches(self, paths: Sequence[Path]) -> AsyncIterator[List[TextDetection]]:
        """Yield the detections of each batch as soon as the service answers it."""
        for start in range(0, len(paths), self.batch_size):
            yield await self._annotate_batch(list(paths[start : start + self.batch_size]))

    async def annotate(self, paths: Sequence[Path]) -> List[TextDetection]:
        """Detect text in every image, preserving input order."""
        detections: List[TextDetection] = []
        async for batch in self.iter_batches(paths):
            detections.extend(batch)
        return detections

    async def _annotate_batch(self, paths: List[Path]) -> List[TextDetection]:
        failed: dict[Path, TextDetection] = {}
        readable: List[Path] = []
        requests = []
        for path in paths:
            try:
                requests.append(build_request(path))
            except OSError as exc:
                LOGGER.error("Failed to read %s: %s", path, exc)
                failed[path] = TextDetection(path=path, error=f"unreadable: {exc}")
                continue
            readable.append(path)

        detected: dict[Path, TextDetection] = {}
        if requests:
            LOGGER.info("Requesting text detection for %d image(s)", len(requests))
            try:
                result = await self.client.batch_annotate_images(requests=requests)
            except GoogleAPIError as exc:
                raise AnnotationServiceError(f"Text detection request failed: {exc}") from exc

            responses = list(result.responses)
            if len(responses) != len(readable):
                raise AnnotationServiceError(
                    f"Expected {len(readable)} annotation responses, got {len(responses)}"
                )
            detected = {path: to_detection(path, resp) for path, resp in zip(readable, responses)}

        return [failed.get(path) or detected[path] for path in paths]


@asynccontextmanager
async def open_annotator(config: AppConfig) -> AsyncIterator[ImageAnnotator]:
    """Provide an annotator for the duration of a block and always close it."""
    annotator = ImageAnnotator(batch_size=config.batch_size)
    try:
        yield annotator
    finally:
        await annotator.close()
