"""OCR-backed inverted word index over Redis."""

__version__ = "0.1.0"
