"""Text escaping for the XML report.

Filenames, category and check names are supplied from outside and may
contain any character, so every attribute value goes through ``escape``.
"""

from __future__ import annotations

import re
from xml.sax.saxutils import escape as _sax_escape

_ATTRIBUTE_ENTITIES = {
    "'": "&apos;",
    '"': "&quot;",
    "\n": "&#10;",
    "\r": "&#13;",
    "\t": "&#9;",
}

# Code points that are not allowed anywhere in an XML 1.0 document
_INVALID_XML10_RE = re.compile(
    r"[^\u0009\u000a\u000d\u0020-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]"
)


def strip_invalid_chars(text: object) -> str:
    """Drop code points that cannot appear in an XML 1.0 document."""
    return _INVALID_XML10_RE.sub("", str(text))


def escape(text: object) -> str:
    """Escape *text* for use inside a single- or double-quoted attribute."""
    return _sax_escape(strip_invalid_chars(text), _ATTRIBUTE_ENTITIES)
