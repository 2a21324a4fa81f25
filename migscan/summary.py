"""
migscan/summary.py
------------------
Aggregate totals over a list of FileRecords.
"""
from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List

from migscan.records import FileRecord, bytes_to_mb

NO_EXTENSION = "(none)"


@dataclass
class Summary:
    total_files: int = 0
    total_size_mb: float = 0.0
    files_with_issues: int = 0
    count_by_type: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_records(cls, records: List[FileRecord], total_size_bytes: int) -> "Summary":
        counts = Counter((r.extension.strip() or NO_EXTENSION) for r in records)
        return cls(
            total_files=len(records),
            total_size_mb=bytes_to_mb(total_size_bytes),
            files_with_issues=sum(1 for r in records if r.has_issues),
            # most frequent first, ties by name
            count_by_type=dict(sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))),
        )

    def to_dict(self) -> dict:
        return {
            "total_files": self.total_files,
            "total_size_mb": round(self.total_size_mb, 2),
            "files_with_issues": self.files_with_issues,
            "count_by_type": dict(self.count_by_type),
        }
