"""
mcp_server.py
-------------
Model Context Protocol (MCP) server for the migration scanner.

Exposes inspection, scanning and report writing as MCP tools so an
assistant can survey a share without opening the Streamlit UI.

Usage
-----
  pip install -e .
  python mcp_server.py

Tools exposed
-------------
  inspect_file      – DOCX/XLSX metadata (author, pages, sheets, encryption)
  scan_directory    – inventory + rule findings, no report written
  write_report      – scan and write the .xlsx report
  run_full_scan     – config file aware scan + report in one call
"""
from __future__ import annotations
from typing import Optional

from mcp.server.fastmcp import FastMCP

from migscan.agents import InspectAgent, ScanAgent, ReportAgent, ScanOrchestrator
from migscan.config import load_config

# ── Server instance ────────────────────────────────────────────────────────────
mcp = FastMCP(
    "migration-scanner",
    instructions=(
        "Tools for inventorying a directory before a data migration and "
        "flagging blockers: over-long paths, special characters in names, "
        "oversized files, encrypted Office documents. Use inspect_file for a "
        "single DOCX/XLSX, scan_directory for findings, write_report to "
        "produce the Excel report."
    ),
)

# ── Shared agent instances (stateless, safe to reuse) ─────────────────────────
_inspect = InspectAgent()
_scan    = ScanAgent()
_report  = ReportAgent()
_orch    = ScanOrchestrator()


# ── Tool definitions ───────────────────────────────────────────────────────────

@mcp.tool()
def inspect_file(path: str) -> dict:
    """
    Read OOXML metadata from a .docx or .xlsx.

    Parameters
    ----------
    path : str
        Absolute or relative path to the file.

    Returns
    -------
    dict
        path, type, inspection (author/pages/encrypted for DOCX,
        sheet_count/encrypted for XLSX, None for other types).
    """
    return _inspect.run(path)


@mcp.tool()
def scan_directory(source: str, max_size_mb: int = 50) -> dict:
    """
    Scan a directory and return the summary plus every flagged file.

    Parameters
    ----------
    source : str
        Directory to scan recursively.
    max_size_mb : int
        Files larger than this are flagged.

    Returns
    -------
    dict
        summary, flagged ([{path, issues}]), duration_s.
    """
    cfg = load_config(source, max_size_mb)
    result = _scan.run(cfg)
    return {
        "summary": result.summary().to_dict(),
        "flagged": [{"path": r.path, "issues": r.issues} for r in result.records if r.has_issues],
        "duration_s": round(result.duration_s, 3),
    }


@mcp.tool()
def write_report(source: str, output_file: str, max_size_mb: int = 50) -> str:
    """
    Scan *source* and write the two-sheet Excel report.

    Returns
    -------
    str
        Absolute path of the written workbook.
    """
    cfg = load_config(source, max_size_mb, output_file)
    return str(_report.run(_scan.run(cfg), cfg.output_file))


@mcp.tool()
def run_full_scan(
    source: Optional[str] = None,
    max_size_mb: Optional[int] = None,
    output_file: Optional[str] = None,
    config_path: Optional[str] = None,
) -> dict:
    """
    Resolve configuration (JSON config file + overrides), scan and write
    the report in one call.

    Returns
    -------
    dict
        Keys: source_dir, output_file, summary, flagged, duration_s.
    """
    return _orch.run_full_scan(source, max_size_mb, output_file, config_path)


# ── Entry point ────────────────────────────────────────────────────────────────
if __name__ == "__main__":
    mcp.run()
