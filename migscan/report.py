"""
migscan/report.py
-----------------
Turn scan results into the two report sheets and write the workbook.
"""
from __future__ import annotations
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from migscan.records import FileRecord
from migscan.summary import Summary
from migscan.writer import PackageProperties, write_workbook

INVENTORY_SHEET = "File Inventory"
SUMMARY_SHEET = "Summary"

INVENTORY_HEADER = [
    "Path", "Filename", "Size (MB)", "Type", "Created Date", "Modified Date", "Issues Found",
]


def round2(v: float) -> str:
    return f"{v:.2f}"


def inventory_rows(records: List[FileRecord]) -> List[List[Any]]:
    rows: List[List[Any]] = [list(INVENTORY_HEADER)]
    for r in records:
        rows.append([
            r.path,
            r.filename,
            round2(r.size_mb) if r.size_mb >= 0 else "",
            r.extension,
            r.created,
            r.modified,
            "; ".join(r.issues),
        ])
    return rows


def summary_rows(summary: Summary) -> List[List[Any]]:
    rows: List[List[Any]] = [
        ["Metric", "Value"],
        ["Total files scanned", summary.total_files],
        ["Total size (MB)", round2(summary.total_size_mb)],
        ["Files with issues", summary.files_with_issues],
        [],
        ["Type", "Count"],
    ]
    rows += [[ext, count] for ext, count in summary.count_by_type.items()]
    return rows


def report_sheets(records: List[FileRecord], summary: Summary) -> Dict[str, List[List[Any]]]:
    return {
        INVENTORY_SHEET: inventory_rows(records),
        SUMMARY_SHEET: summary_rows(summary),
    }


def write_report(
    records: List[FileRecord],
    summary: Summary,
    output_file: str | os.PathLike,
    properties: Optional[PackageProperties] = None,
) -> Path:
    """Write the inventory + summary workbook; returns the absolute output path."""
    return write_workbook(report_sheets(records, summary), output_file, properties)
