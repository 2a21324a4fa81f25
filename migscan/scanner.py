"""
migscan/scanner.py
------------------
Directory scanner: walk the source tree, build a FileRecord per file, apply
the rule checks and inspect DOCX/XLSX containers.

A failure on one file never aborts the scan; it becomes an issue on that
file's record and a WARN log line.
"""
from __future__ import annotations
import datetime
import logging
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from migscan.config import ScanConfig
from migscan.inspector import inspect_docx, inspect_xlsx
from migscan.records import (
    ISSUE_METADATA_FAILED,
    FileRecord,
    bytes_to_mb,
    docx_issues,
    extension_of,
    validate,
    xlsx_issues,
)
from migscan.summary import Summary

log = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass
class ScanResult:
    source_dir: str
    records: List[FileRecord] = field(default_factory=list)
    total_size_bytes: int = 0
    duration_s: float = 0.0

    @property
    def total_size_mb(self) -> float:
        return bytes_to_mb(self.total_size_bytes)

    def summary(self) -> Summary:
        return Summary.from_records(self.records, self.total_size_bytes)


def _fmt_time(ts: float) -> str:
    return datetime.datetime.fromtimestamp(ts).strftime(DATE_FORMAT)


def _created_ts(st: os.stat_result) -> float:
    # st_birthtime where the platform records it, inode change time otherwise
    return getattr(st, "st_birthtime", st.st_ctime)


def fallback_record(path: Path, error: BaseException) -> FileRecord:
    """Record for a file that could not be stat'ed or read."""
    rec = FileRecord(
        path=str(path.absolute()),
        filename=path.name or str(path),
        extension=extension_of(path.name or str(path)),
    )
    rec.issues.append(f"Inaccessible: {type(error).__name__}")
    return rec


def inspect_metadata(record: FileRecord, path: Path) -> None:
    """Append DOCX/XLSX metadata issues; other extensions are left alone."""
    try:
        if record.extension == "DOCX":
            record.issues.extend(docx_issues(inspect_docx(path)))
        elif record.extension == "XLSX":
            record.issues.extend(xlsx_issues(inspect_xlsx(path)))
    except OSError as e:
        log.warning("Metadata parse failed for %s: %s", path, e)
        record.issues.append(ISSUE_METADATA_FAILED)


def process_file(path: Path, st: os.stat_result, max_size_mb: int) -> FileRecord:
    rec = FileRecord(
        path=str(path.absolute()),
        filename=path.name,
        extension=extension_of(path.name),
        size_mb=bytes_to_mb(st.st_size),
        created=_fmt_time(_created_ts(st)),
        modified=_fmt_time(st.st_mtime),
    )
    validate(rec, st.st_size, max_size_mb)
    inspect_metadata(rec, path)
    return rec


def iter_files(source_dir: Path, errors: Optional[List[OSError]] = None):
    """Yield every non-directory path below *source_dir*, sorted per directory."""
    def _onerror(e: OSError) -> None:
        log.warning("Cannot access directory: %s -> %s", e.filename, e.strerror or e)
        if errors is not None:
            errors.append(e)

    for dirpath, dirnames, filenames in os.walk(source_dir, onerror=_onerror):
        dirnames.sort()
        for name in sorted(filenames):
            yield Path(dirpath) / name


def scan(config: ScanConfig) -> ScanResult:
    """Walk config.source_dir and return the inventory."""
    result = ScanResult(source_dir=str(config.source_dir))
    started = time.monotonic()
    dir_errors: List[OSError] = []

    for path in iter_files(config.source_dir, dir_errors):
        try:
            st = path.stat()
        except OSError as e:
            log.warning("Cannot access file: %s -> %s", path, e)
            result.records.append(fallback_record(path, e))
            continue
        result.records.append(process_file(path, st, config.max_size_mb))
        result.total_size_bytes += st.st_size

    for e in dir_errors:
        if e.filename and Path(e.filename) != config.source_dir:
            result.records.append(fallback_record(Path(e.filename), e))

    result.duration_s = time.monotonic() - started
    return result
