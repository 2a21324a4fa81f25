"""
migscan/agents.py
-----------------
One agent class per scan phase.  Each agent wraps a single module and
exposes a plain .run() so the CLI, the Streamlit UI (app.py) and the MCP
server (mcp_server.py) drive the same code.

Agent classes
-------------
  InspectAgent      – inspect_docx() / inspect_xlsx()  → dict
  ScanAgent         – scan()                            → ScanResult
  ReportAgent       – write_report()                    → Path
  ScanOrchestrator  – chains scan + report              → dict summary

All agents are stateless; instantiate once and call .run() as often as needed.
"""
from __future__ import annotations
import os
from pathlib import Path
from typing import Any, Optional

from migscan.archive import Source
from migscan.config import ScanConfig, load_config
from migscan.inspector import inspect_docx, inspect_xlsx
from migscan.records import extension_of
from migscan.report import write_report
from migscan.scanner import ScanResult, scan


class InspectAgent:
    """
    Read OOXML metadata from a single DOCX or XLSX.
    """

    def run(self, path: str | os.PathLike, data: Optional[Source] = None) -> dict:
        """
        Parameters
        ----------
        path : str | PathLike
            File to inspect.  Its extension selects DOCX or XLSX handling.
        data : bytes | file object, optional
            Content to inspect instead of reading *path* (uploads).

        Returns
        -------
        dict
            {"path", "type", "inspection"}; inspection is None for other types.

        Raises
        ------
        OSError
            The file could not be read or is not a ZIP container (MalformedArchive).
        """
        p = Path(path)
        kind = extension_of(p.name)
        source = data if data is not None else p
        inspection: Optional[dict[str, Any]] = None
        if kind == "DOCX":
            inspection = inspect_docx(source).to_dict()
        elif kind == "XLSX":
            inspection = inspect_xlsx(source).to_dict()
        return {"path": str(p if data is not None else p.absolute()), "type": kind, "inspection": inspection}


class ScanAgent:
    """
    Walk a source directory and build the file inventory.
    """

    def run(self, config: ScanConfig) -> ScanResult:
        return scan(config)


class ReportAgent:
    """
    Write the inventory + summary workbook for a ScanResult.
    """

    def run(self, result: ScanResult, output_file: str | os.PathLike) -> Path:
        return write_report(result.records, result.summary(), output_file)


class ScanOrchestrator:
    """
    Resolve configuration, scan, and write the report in one call.

    >>> orch = ScanOrchestrator()
    >>> out = orch.run_full_scan("/data/share", max_size_mb=100)
    >>> out["summary"]["total_files"]
    """

    def __init__(self) -> None:
        self.scan_agent = ScanAgent()
        self.report_agent = ReportAgent()

    def run_full_scan(
        self,
        source: Optional[str] = None,
        max_size_mb: Optional[Any] = None,
        output_file: Optional[str] = None,
        config_path: Optional[str] = None,
    ) -> dict:
        """
        Keys in the returned dict
        -------------------------
        source_dir     : str
        output_file    : str   – absolute path of the written workbook
        summary        : dict  – Summary.to_dict()
        flagged        : list  – [{"path", "issues"}, ...] for files with issues
        duration_s     : float

        Raises ConfigError for bad configuration, OSError if the report
        cannot be written.
        """
        cfg = load_config(source, max_size_mb, output_file, config_path)
        result = self.scan_agent.run(cfg)
        out = self.report_agent.run(result, cfg.output_file)
        return {
            "source_dir": result.source_dir,
            "output_file": str(out),
            "summary": result.summary().to_dict(),
            "flagged": [{"path": r.path, "issues": list(r.issues)} for r in result.records if r.has_issues],
            "duration_s": round(result.duration_s, 3),
        }
