"""
migscan/inspector.py
--------------------
Package Inspector: typed metadata for DOCX and XLSX containers.

Scanning is name-driven and tolerant.  Missing or unparsable parts yield
None / 0; only a container that cannot be opened at all raises
(MalformedArchive, or the OSError from reading the path).
"""
from __future__ import annotations
import logging
from contextlib import closing
from dataclasses import asdict, dataclass
from typing import Optional

from migscan.archive import Source, iter_entries
from migscan.xml_fields import count_elements, extract_int, extract_text

log = logging.getLogger(__name__)

ENCRYPTION_PARTS = ("EncryptedPackage", "EncryptionInfo")
CORE_PROPS_PART = "docProps/core.xml"
APP_PROPS_PART = "docProps/app.xml"
WORKBOOK_PART = "xl/workbook.xml"

DC_NS = "http://purl.org/dc/elements/1.1/"


@dataclass
class DocxInspection:
    author: Optional[str] = None
    pages: Optional[int] = None
    encrypted: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class XlsxInspection:
    sheet_count: int = 0  # 0 = undetermined
    encrypted: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


def _author(xml: bytes) -> Optional[str]:
    author = extract_text(xml, DC_NS, "creator", fallback="dc:creator")
    if author is None or not author.strip():
        return None
    return author


def _sheet_count(xml: bytes) -> int:
    count = count_elements(xml, "sheet")
    if count is None:
        log.debug("%s did not parse; sheet count defaults to 0", WORKBOOK_PART)
        return 0
    return count


def inspect_docx(source: Source) -> DocxInspection:
    """
    Scan every entry once.  Encryption markers are accumulated, not an early
    exit: author/pages found before or after the marker are kept.
    """
    info = DocxInspection()
    with closing(iter_entries(source)) as entries:
        for entry in entries:
            if entry.matches(*ENCRYPTION_PARTS):
                info.encrypted = True
            elif entry.matches(CORE_PROPS_PART):
                info.author = _author(entry.read())
            elif entry.matches(APP_PROPS_PART):
                info.pages = extract_int(entry.read(), "Pages")
    log.debug("docx inspection: %s", info)
    return info


def inspect_xlsx(source: Source) -> XlsxInspection:
    """Encryption flag and sheet count in a single combined pass."""
    info = XlsxInspection()
    with closing(iter_entries(source)) as entries:
        for entry in entries:
            if entry.matches(*ENCRYPTION_PARTS):
                info.encrypted = True
            elif entry.matches(WORKBOOK_PART):
                info.sheet_count = _sheet_count(entry.read())
    log.debug("xlsx inspection: %s", info)
    return info


def inspect_xlsx_encrypted(source: Source) -> bool:
    """True as soon as an encryption marker entry is seen."""
    with closing(iter_entries(source)) as entries:
        for entry in entries:
            if entry.matches(*ENCRYPTION_PARTS):
                return True
    return False


def inspect_xlsx_sheet_count(source: Source) -> int:
    """Count of <sheet> elements in xl/workbook.xml; 0 when absent or unparsable."""
    with closing(iter_entries(source)) as entries:
        for entry in entries:
            if entry.matches(WORKBOOK_PART):
                return _sheet_count(entry.read())
    return 0
