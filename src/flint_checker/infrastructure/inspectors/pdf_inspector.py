"""PDF inspector — structural facts about a PDF, read with ``pdfplumber``.

Three entry points back the PDF checks:

* ``is_valid_pdf`` — the file opens and every page's content stream parses.
* ``has_drm`` — the document carries an ``/Encrypt`` dictionary, needs a
  password, or uses a security handler that cannot be opened.
* ``inspect_pdf`` — a ``<pdfReport>`` XML document the PDF Schematron
  policy is evaluated against::

      <pdfReport file="book.pdf">
        <encrypted>false</encrypted>
        <passwordProtected>false</passwordProtected>
        <pageCount>2</pageCount>
        <javascript>false</javascript>
        <embeddedFiles>0</embeddedFiles>
        <metadata><entry key="Title">...</entry></metadata>
        <pages><page number="1" characters="812"/></pages>
        <fonts><font name="Helvetica"/></fonts>
      </pdfReport>
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any, Optional

import pdfplumber
from lxml import etree
from pdfminer.pdfdocument import PDFEncryptionError
from pdfminer.pdftypes import resolve1

from flint_checker.domain.errors import ValidatorError
from flint_checker.domain.models.markup import strip_invalid_chars

logger = logging.getLogger(__name__)

StopFn = Callable[[], bool]

# Name trees deeper than this are treated as malformed
_MAX_NAME_TREE_DEPTH = 32


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def is_password_error(exc: BaseException) -> bool:
    """True if *exc*, or an exception it wraps, is a pdfminer encryption error.

    pdfplumber re-raises some pdfminer errors wrapped in its own exception
    type, so the cause chain and the exception arguments are searched too.
    """
    seen: set[int] = set()
    pending: list[BaseException] = [exc]
    while pending:
        current = pending.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        if isinstance(current, PDFEncryptionError):
            return True
        for linked in (current.__cause__, current.__context__, *current.args):
            if isinstance(linked, BaseException):
                pending.append(linked)
    return False


def _check_stop(should_stop: Optional[StopFn], path: Path) -> None:
    if should_stop is not None and should_stop():
        raise ValidatorError(f"Inspection of {path} was cancelled")


def _literal_name(value: Any) -> Optional[str]:
    value = resolve1(value)
    name = getattr(value, "name", value)
    if isinstance(name, bytes):
        name = name.decode("latin-1")
    return name if isinstance(name, str) else None


def _count_name_tree(node: Any, depth: int = 0) -> int:
    """Number of leaf entries in a PDF name tree."""
    node = resolve1(node)
    if not isinstance(node, dict) or depth > _MAX_NAME_TREE_DEPTH:
        return 0
    total = 0
    names = resolve1(node.get("Names"))
    if isinstance(names, list):
        total += len(names) // 2
    kids = resolve1(node.get("Kids"))
    if isinstance(kids, list):
        total += sum(_count_name_tree(kid, depth + 1) for kid in kids)
    return total


def _has_javascript(catalog: dict) -> bool:
    names = resolve1(catalog.get("Names"))
    if isinstance(names, dict) and "JavaScript" in names:
        return True
    action = resolve1(catalog.get("OpenAction"))
    if isinstance(action, dict) and _literal_name(action.get("S")) == "JavaScript":
        return True
    return False


def _embedded_file_count(catalog: dict) -> int:
    names = resolve1(catalog.get("Names"))
    if not isinstance(names, dict):
        return 0
    return _count_name_tree(names.get("EmbeddedFiles"))


def _metadata_text(value: Any) -> str:
    value = resolve1(value)
    if isinstance(value, bytes):
        value = value.decode("latin-1")
    elif not isinstance(value, str):
        value = _literal_name(value) or str(value)
    return strip_invalid_chars(value)


def _sub(parent: etree._Element, tag: str, text: object, **attrib: str) -> etree._Element:
    element = etree.SubElement(parent, tag, **attrib)
    element.text = str(text)
    return element


def _flag(value: bool) -> str:
    return "true" if value else "false"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def is_valid_pdf(path: Path, should_stop: Optional[StopFn] = None) -> bool:
    """Parse the whole document; any parse failure means not well-formed."""
    try:
        with pdfplumber.open(path) as pdf:
            for page in pdf.pages:
                _check_stop(should_stop, path)
                page.chars  # forces the content stream to parse
    except ValidatorError:
        raise
    except Exception as exc:  # noqa: BLE001
        logger.warning("%s leads to invalidity of %s: %s", type(exc).__name__, path, exc)
        return False
    return True


def has_drm(path: Path) -> bool:
    """Decide whether *path* is encrypted.

    Files that fail to parse for reasons other than encryption are
    reported as DRM-free; other checks are expected to catch them.
    """
    try:
        with pdfplumber.open(path) as pdf:
            return pdf.doc.encryption is not None
    except Exception as exc:  # noqa: BLE001
        if is_password_error(exc):
            logger.debug("%s needs a password or an unknown security handler", path)
            return True
        logger.warning("cannot decide on DRM for %s: %s", path, exc)
        return False


def inspect_pdf(path: Path, should_stop: Optional[StopFn] = None) -> etree._ElementTree:
    """Build the ``<pdfReport>`` document for *path*.

    A password-protected document yields a report with
    ``passwordProtected`` set and no page data.

    Raises:
        ValidatorError: If the file cannot be parsed for any other reason,
            or *should_stop* reports cancellation.
    """
    root = etree.Element("pdfReport", file=strip_invalid_chars(Path(path).name))
    try:
        with pdfplumber.open(path) as pdf:
            catalog = pdf.doc.catalog
            _sub(root, "encrypted", _flag(pdf.doc.encryption is not None))
            _sub(root, "passwordProtected", "false")
            _sub(root, "pageCount", len(pdf.pages))
            _sub(root, "javascript", _flag(_has_javascript(catalog)))
            _sub(root, "embeddedFiles", _embedded_file_count(catalog))

            metadata = etree.SubElement(root, "metadata")
            for key, value in pdf.metadata.items():
                _sub(metadata, "entry", _metadata_text(value), key=strip_invalid_chars(key))

            pages = etree.SubElement(root, "pages")
            fonts: dict[str, None] = {}
            for page in pdf.pages:
                _check_stop(should_stop, path)
                chars = page.chars
                etree.SubElement(
                    pages,
                    "page",
                    number=str(page.page_number),
                    characters=str(len(chars)),
                )
                fonts.update(dict.fromkeys(c.get("fontname", "") for c in chars))
            font_list = etree.SubElement(root, "fonts")
            for name in fonts:
                if name:
                    etree.SubElement(font_list, "font", name=strip_invalid_chars(name))
    except ValidatorError:
        raise
    except Exception as exc:
        if not is_password_error(exc):
            raise ValidatorError(f"Cannot inspect {path}: {exc}") from exc
        logger.debug("%s is password protected; reporting encryption only", path)
        root = etree.Element("pdfReport", file=strip_invalid_chars(Path(path).name))
        _sub(root, "encrypted", "true")
        _sub(root, "passwordProtected", "true")
        _sub(root, "pageCount", 0)
        _sub(root, "javascript", "false")
        _sub(root, "embeddedFiles", 0)
        etree.SubElement(root, "metadata")
        etree.SubElement(root, "pages")
        etree.SubElement(root, "fonts")
    return etree.ElementTree(root)
