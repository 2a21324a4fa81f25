"""
migscan/records.py
------------------
One FileRecord per scanned file, plus the rule checks that flag migration
blockers on it.

Issue strings
-------------
  Path length > 250                  full path longer than 250 characters
  Special chars in name: <chars>     any of  < > : " / \\ | ? *
  Size > <N>MB                       file larger than the configured threshold
  Password-protected or encrypted    OOXML encryption parts present
  Pages=<n> / Author='<a>'           DOCX metadata
  Sheets=<n>                         XLSX metadata
  Metadata parse failed              container could not be inspected
  Inaccessible: <ErrorClass>         file could not be stat'ed or read
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List

from migscan.inspector import DocxInspection, XlsxInspection

MAX_PATH_LENGTH = 250
SPECIAL_CHARS = '<>:"/\\|?*'

ISSUE_ENCRYPTED = "Password-protected or encrypted"
ISSUE_METADATA_FAILED = "Metadata parse failed"


@dataclass
class FileRecord:
    path: str
    filename: str
    extension: str
    size_mb: float = -1.0  # -1 = unknown
    created: str = ""
    modified: str = ""
    issues: List[str] = field(default_factory=list)

    @property
    def has_issues(self) -> bool:
        return bool(self.issues)


def extension_of(name: str) -> str:
    """Upper-cased text after the last dot; "" for no dot or a trailing dot."""
    dot = name.rfind(".")
    if 0 <= dot < len(name) - 1:
        return name[dot + 1:].upper()
    return ""


def find_specials(name: str) -> str:
    return "".join(ch for ch in name if ch in SPECIAL_CHARS)


def bytes_to_mb(size: int) -> float:
    return size / 1024.0 / 1024.0


def validate(record: FileRecord, size_bytes: int, max_size_mb: int) -> None:
    """Append rule violations for path length, file name and size."""
    if len(record.path) > MAX_PATH_LENGTH:
        record.issues.append(f"Path length > {MAX_PATH_LENGTH}")
    specials = find_specials(record.filename)
    if specials:
        record.issues.append(f"Special chars in name: {specials}")
    if bytes_to_mb(size_bytes) > max_size_mb:
        record.issues.append(f"Size > {max_size_mb}MB")


def docx_issues(info: DocxInspection) -> List[str]:
    issues: List[str] = []
    if info.encrypted:
        issues.append(ISSUE_ENCRYPTED)
    if info.pages is not None:
        issues.append(f"Pages={info.pages}")
    if info.author is not None and info.author.strip():
        issues.append(f"Author='{info.author}'")
    return issues


def xlsx_issues(info: XlsxInspection) -> List[str]:
    issues: List[str] = []
    if info.encrypted:
        issues.append(ISSUE_ENCRYPTED)
    issues.append(f"Sheets={info.sheet_count}")
    return issues
