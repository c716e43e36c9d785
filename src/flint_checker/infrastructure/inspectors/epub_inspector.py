"""EPUB inspector — container facts read with ``zipfile`` and ``lxml``.

An EPUB is a zip archive whose first entry, ``mimetype``, is stored
uncompressed and reads ``application/epub+zip``.  ``META-INF/container.xml``
points at the package (OPF) document that carries metadata, manifest and
spine.  DRM shows up as ``META-INF/rights.xml`` or as encrypted resources
listed in ``META-INF/encryption.xml``; font obfuscation uses the same file
but only scrambles embedded fonts, so it is reported separately.
"""

from __future__ import annotations

import logging
import posixpath
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from lxml import etree

from flint_checker.domain.errors import ValidatorError
from flint_checker.domain.models.markup import strip_invalid_chars
from flint_checker.infrastructure.schematron.policy import safe_parser

logger = logging.getLogger(__name__)

EPUB_MIMETYPE = "application/epub+zip"

MIMETYPE_ENTRY = "mimetype"
CONTAINER_ENTRY = "META-INF/container.xml"
ENCRYPTION_ENTRY = "META-INF/encryption.xml"
RIGHTS_ENTRY = "META-INF/rights.xml"

_NSMAP = {
    "ocf": "urn:oasis:names:tc:opendocument:xmlns:container",
    "opf": "http://www.idpf.org/2007/opf",
    "dc": "http://purl.org/dc/elements/1.1/",
    "enc": "http://www.w3.org/2001/04/xmlenc#",
}

# IDPF and Adobe font obfuscation algorithms
OBFUSCATION_ALGORITHMS = frozenset(
    {
        "http://www.idpf.org/2008/embedding",
        "http://ns.adobe.com/pdf/enc#RC",
    }
)


@dataclass(frozen=True)
class EncryptedResource:
    """One ``<EncryptedData>`` entry of ``encryption.xml``."""

    uri: str
    algorithm: str

    @property
    def is_obfuscation(self) -> bool:
        return self.algorithm in OBFUSCATION_ALGORITHMS


# ---------------------------------------------------------------------------
# Archive helpers
# ---------------------------------------------------------------------------


def _read_xml(archive: zipfile.ZipFile, entry: str) -> Optional[etree._Element]:
    """Parse *entry* of *archive*; ``None`` if missing or not XML."""
    try:
        data = archive.read(entry)
    except KeyError:
        return None
    try:
        return etree.fromstring(data, safe_parser())
    except etree.XMLSyntaxError as exc:
        logger.debug("%s is not well-formed XML: %s", entry, exc)
        return None


def mimetype_entry_ok(archive: zipfile.ZipFile) -> bool:
    """True if the archive holds a ``mimetype`` entry reading the EPUB type."""
    try:
        content = archive.read(MIMETYPE_ENTRY)
    except KeyError:
        return False
    return content.strip() == EPUB_MIMETYPE.encode("ascii")


def rootfile_path(archive: zipfile.ZipFile) -> Optional[str]:
    """Path of the package document named by ``container.xml``."""
    container = _read_xml(archive, CONTAINER_ENTRY)
    if container is None:
        return None
    for rootfile in container.iterfind(".//ocf:rootfile", _NSMAP):
        media_type = rootfile.get("media-type", "")
        full_path = rootfile.get("full-path", "").strip()
        if full_path and media_type in ("", "application/oebps-package+xml"):
            return full_path
    return None


def package_document(archive: zipfile.ZipFile) -> Optional[etree._Element]:
    """The parsed OPF ``<package>`` element, if present and well-formed."""
    path = rootfile_path(archive)
    if path is None:
        return None
    package = _read_xml(archive, path)
    if package is None or package.tag != f"{{{_NSMAP['opf']}}}package":
        return None
    return package


def encrypted_resources(archive: zipfile.ZipFile) -> list[EncryptedResource]:
    """Every resource listed in ``encryption.xml``, in document order."""
    encryption = _read_xml(archive, ENCRYPTION_ENTRY)
    if encryption is None:
        return []
    resources = []
    for data in encryption.iterfind(".//enc:EncryptedData", _NSMAP):
        method = data.find("enc:EncryptionMethod", _NSMAP)
        reference = data.find("enc:CipherData/enc:CipherReference", _NSMAP)
        resources.append(
            EncryptedResource(
                uri="" if reference is None else reference.get("URI", ""),
                algorithm="" if method is None else method.get("Algorithm", ""),
            )
        )
    return resources


def open_epub(path: Path) -> zipfile.ZipFile:
    """Open *path* as a zip archive.

    Raises:
        ValidatorError: If the file is not a readable zip archive.
    """
    try:
        return zipfile.ZipFile(path)
    except (OSError, zipfile.BadZipFile) as exc:
        raise ValidatorError(f"{path} is not a zip archive: {exc}") from exc


# ---------------------------------------------------------------------------
# DRM
# ---------------------------------------------------------------------------


def has_rights_file(path: Path) -> bool:
    with open_epub(path) as archive:
        return RIGHTS_ENTRY in archive.namelist()


def has_encryption(path: Path, font_obfuscation_is_drm: bool = False) -> bool:
    """True if ``encryption.xml`` lists a resource that counts as DRM."""
    with open_epub(path) as archive:
        resources = encrypted_resources(archive)
    for resource in resources:
        if font_obfuscation_is_drm or not resource.is_obfuscation:
            logger.debug("encrypted resource %s (%s)", resource.uri, resource.algorithm)
            return True
    return False


# ---------------------------------------------------------------------------
# Property report
# ---------------------------------------------------------------------------


def _sub(parent: etree._Element, tag: str, text: object = "", **attrib: str) -> etree._Element:
    element = etree.SubElement(parent, tag, **attrib)
    element.text = strip_invalid_chars(text)
    return element


def _flag(value: bool) -> str:
    return "true" if value else "false"


def _package_report(parent: etree._Element, package: etree._Element, opf_path: str) -> None:
    element = etree.SubElement(
        parent, "package", path=opf_path, version=package.get("version", "")
    )
    metadata = etree.SubElement(element, "metadata")
    for field in ("title", "language", "identifier", "creator"):
        node = package.find(f"opf:metadata/dc:{field}", _NSMAP)
        _sub(metadata, field, "" if node is None else "".join(node.itertext()).strip())

    base = posixpath.dirname(opf_path)
    manifest = package.findall("opf:manifest/opf:item", _NSMAP)
    _sub(element, "manifestItems", len(manifest))
    _sub(element, "spineItems", len(package.findall("opf:spine/opf:itemref", _NSMAP)))
    items = etree.SubElement(element, "manifest")
    for item in manifest:
        href = item.get("href", "")
        etree.SubElement(
            items,
            "item",
            id=item.get("id", ""),
            href=posixpath.join(base, href) if base else href,
            mediaType=item.get("media-type", ""),
        )


def inspect_epub(path: Path, font_obfuscation_is_drm: bool = False) -> etree._ElementTree:
    """Build the ``<epubReport>`` document for *path*.

    Raises:
        ValidatorError: If *path* is not a zip archive.
    """
    root = etree.Element("epubReport", file=strip_invalid_chars(Path(path).name))
    with open_epub(path) as archive:
        infos = archive.infolist()
        names = [info.filename for info in infos]

        mimetype = None
        for info in infos:
            if info.filename == MIMETYPE_ENTRY:
                mimetype = info
                break
        if mimetype is None:
            etree.SubElement(root, "mimetype", present="false", first="false", stored="false")
        else:
            content = archive.read(MIMETYPE_ENTRY).decode("ascii", errors="replace")
            _sub(
                root,
                "mimetype",
                content.strip(),
                present="true",
                first=_flag(infos[0] is mimetype),
                stored=_flag(mimetype.compress_type == zipfile.ZIP_STORED),
            )

        opf_path = rootfile_path(archive)
        etree.SubElement(root, "container", present=_flag(CONTAINER_ENTRY in names))
        package = package_document(archive)
        if package is not None and opf_path is not None:
            _package_report(root, package, opf_path)

        encryption = etree.SubElement(
            root, "encryption", present=_flag(ENCRYPTION_ENTRY in names)
        )
        for resource in encrypted_resources(archive):
            obfuscation = resource.is_obfuscation and not font_obfuscation_is_drm
            _sub(
                encryption,
                "algorithm",
                resource.algorithm,
                uri=resource.uri,
                obfuscation=_flag(obfuscation),
            )

        etree.SubElement(root, "rights", present=_flag(RIGHTS_ENTRY in names))
        _sub(root, "entryCount", len(names))
    return etree.ElementTree(root)
