"""Utility helpers for working with files."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator


def iter_file_paths(directory: Path) -> Iterator[Path]:
    """Yield the regular files directly inside ``directory``, sorted by name.

    Sub-directories are skipped, not descended into.
    """
    for child in sorted(directory.iterdir()):
        if not child.is_dir():
            yield child


def read_bytes(path: Path) -> bytes:
    """Read the full binary content of a file."""
    with path.open("rb") as handle:
        return handle.read()
