"""Format registry — the explicit list of format checkers Flint knows.

Formats are listed here by hand rather than discovered at runtime; adding
a format means adding one line to ``_FORMATS``.
"""

from __future__ import annotations

from collections.abc import Callable

from flint_checker.config.models import FlintConfig
from flint_checker.domain.errors import UnsupportedFormatError
from flint_checker.infrastructure.formats.base import BaseFormat
from flint_checker.infrastructure.formats.epub_format import EpubFormat
from flint_checker.infrastructure.formats.pdf_format import PdfFormat

FormatFactory = Callable[[FlintConfig], BaseFormat]

_FORMATS: tuple[tuple[str, FormatFactory], ...] = (
    ("PDF", PdfFormat),
    ("EPUB", EpubFormat),
)


def format_names() -> list[str]:
    """Names of all registered formats, in registration order."""
    return [name for name, _ in _FORMATS]


def create_format(name: str, config: FlintConfig) -> BaseFormat:
    """Instantiate the format registered under *name* (case-insensitive).

    Raises
    ------
    UnsupportedFormatError
        If no format of that name is registered.
    """
    for registered, factory in _FORMATS:
        if registered == name.upper():
            return factory(config)
    raise UnsupportedFormatError(
        f"Unknown format {name!r}; available: {', '.join(format_names())}"
    )


def available_formats(config: FlintConfig) -> list[BaseFormat]:
    """One fresh instance of every registered format."""
    return [factory(config) for _, factory in _FORMATS]
