"""Shared fixtures: PDF files written with fpdf2, EPUB archives with zipfile."""

from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Optional

import pytest
from fpdf import FPDF

from flint_checker.config.loader import clear_cache

CONTAINER_XML = """<?xml version="1.0" encoding="UTF-8"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles>
    <rootfile full-path="OEBPS/content.opf" media-type="application/oebps-package+xml"/>
  </rootfiles>
</container>
"""

CONTENT_OPF = """<?xml version="1.0" encoding="UTF-8"?>
<package xmlns="http://www.idpf.org/2007/opf" version="3.0" unique-identifier="uid">
  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/">
    <dc:identifier id="uid">urn:uuid:0b7e4c1a-5f7a-4a43-9a64-3f1c2b9d8e10</dc:identifier>
    <dc:title>{title}</dc:title>
    <dc:language>en</dc:language>
  </metadata>
  <manifest>
    <item id="ch1" href="chapter1.xhtml" media-type="application/xhtml+xml"/>
  </manifest>
  <spine>
    {spine}
  </spine>
</package>
"""

CHAPTER = """<?xml version="1.0" encoding="UTF-8"?>
<html xmlns="http://www.w3.org/1999/xhtml"><head><title>One</title></head>
<body><p>Chapter one.</p></body></html>
"""

ENCRYPTION_XML = """<?xml version="1.0" encoding="UTF-8"?>
<encryption xmlns="urn:oasis:names:tc:opendocument:xmlns:container"
            xmlns:enc="http://www.w3.org/2001/04/xmlenc#">
  <enc:EncryptedData>
    <enc:EncryptionMethod Algorithm="{algorithm}"/>
    <enc:CipherData><enc:CipherReference URI="OEBPS/chapter1.xhtml"/></enc:CipherData>
  </enc:EncryptedData>
</encryption>
"""

AES128 = "http://www.w3.org/2001/04/xmlenc#aes128-cbc"
IDPF_OBFUSCATION = "http://www.idpf.org/2008/embedding"


@pytest.fixture(autouse=True)
def _fresh_cache():
    """Ensure a clean config cache for every test."""
    clear_cache()
    yield
    clear_cache()


def write_pdf(
    path: Path,
    pages: int = 1,
    title: Optional[str] = "Flint sample",
    author: Optional[str] = "Digital Preservation",
    text: str = "Hello, preservation.",
    user_password: Optional[str] = None,
    owner_password: Optional[str] = None,
) -> Path:
    pdf = FPDF()
    if title:
        pdf.set_title(title)
    if author:
        pdf.set_author(author)
    pdf.set_font("Helvetica", size=12)
    for _ in range(pages):
        pdf.add_page()
        if text:
            pdf.cell(0, 10, text)
    if owner_password is not None:
        pdf.set_encryption(owner_password=owner_password, user_password=user_password or "")
    pdf.output(str(path))
    return path


def write_epub(
    path: Path,
    title: str = "A Sample Book",
    with_spine: bool = True,
    rights: bool = False,
    encryption_algorithm: Optional[str] = None,
    mimetype_first: bool = True,
    with_container: bool = True,
) -> Path:
    spine = '<itemref idref="ch1"/>' if with_spine else ""
    entries = []
    if with_container:
        entries.append(("META-INF/container.xml", CONTAINER_XML))
    entries.append(("OEBPS/content.opf", CONTENT_OPF.format(title=title, spine=spine)))
    entries.append(("OEBPS/chapter1.xhtml", CHAPTER))
    if rights:
        entries.append(("META-INF/rights.xml", "<rights/>"))
    if encryption_algorithm:
        entries.append(
            ("META-INF/encryption.xml", ENCRYPTION_XML.format(algorithm=encryption_algorithm))
        )

    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
        if mimetype_first:
            zf.writestr("mimetype", "application/epub+zip", compress_type=zipfile.ZIP_STORED)
        for name, content in entries:
            zf.writestr(name, content)
        if not mimetype_first:
            zf.writestr("mimetype", "application/epub+zip", compress_type=zipfile.ZIP_STORED)
    return path


@pytest.fixture
def pdf_file(tmp_path: Path) -> Path:
    return write_pdf(tmp_path / "sample.pdf", pages=2)


@pytest.fixture
def epub_file(tmp_path: Path) -> Path:
    return write_epub(tmp_path / "sample.epub")
