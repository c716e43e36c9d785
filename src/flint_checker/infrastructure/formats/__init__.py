"""Format checkers — one plugin per file format, plus the registry."""

from flint_checker.infrastructure.formats.base import BaseFormat
from flint_checker.infrastructure.formats.epub_format import EpubFormat
from flint_checker.infrastructure.formats.pdf_format import PdfFormat
from flint_checker.infrastructure.formats.registry import (
    available_formats,
    create_format,
    format_names,
)

__all__ = [
    "BaseFormat",
    "EpubFormat",
    "PdfFormat",
    "available_formats",
    "create_format",
    "format_names",
]
