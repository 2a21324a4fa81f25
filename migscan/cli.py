"""
migscan/cli.py
--------------
Command line entry point.

  python -m migscan scan --source <dir> [--max-size-mb 50] [--output scan-report.xlsx] [--config scan.json]
  python -m migscan inspect FILE [FILE ...]

Exit codes
----------
  0  success
  1  fatal error (e.g. report could not be written, file could not be inspected)
  2  configuration error
"""
from __future__ import annotations
import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from migscan.agents import InspectAgent
from migscan.config import ConfigError, load_config
from migscan.log import get_logger, log_summary, setup_logging
from migscan.report import write_report
from migscan.scanner import scan

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_CONFIG = 2


def _parse_args(argv: List[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="migscan",
        description="Inventory files and flag data-migration blockers.",
    )
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    s = sub.add_parser("scan", help="Scan a directory and write the Excel report")
    s.add_argument("--source", help="Source directory to scan (required unless in --config)")
    s.add_argument("--max-size-mb", dest="max_size_mb",
                   help="Maximum file size before flagging (default 50)")
    s.add_argument("--output", help="Output Excel filename (default scan-report.xlsx)")
    s.add_argument("--config", help="Optional JSON config file (keys: sourceDir, maxSizeMb, outputFile). "
                                    "Command line values override the file.")

    i = sub.add_parser("inspect", help="Print DOCX/XLSX metadata as JSON")
    i.add_argument("files", nargs="+", help="Files to inspect")
    return p.parse_args(argv)


def _run_scan(args: argparse.Namespace) -> int:
    logger = get_logger()
    try:
        cfg = load_config(args.source, args.max_size_mb, args.output, args.config)
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        return EXIT_CONFIG

    logger.info("Data Migration Scanner")
    logger.info("- Source: %s", cfg.source_dir)
    logger.info("- Max size (MB): %s", cfg.max_size_mb)
    logger.info("- Output: %s", cfg.output_file)
    logger.info("Scanning...")

    result = scan(cfg)
    log_summary("Scanned %s files (%.2f MB) in %.1f s",
                f"{len(result.records):,}", result.total_size_mb, result.duration_s)

    logger.info("Writing Excel report: %s", cfg.output_file)
    out = write_report(result.records, result.summary(), cfg.output_file)
    logger.info("Done. %s", out)
    return EXIT_SUCCESS


def _run_inspect(args: argparse.Namespace) -> int:
    agent = InspectAgent()
    results = []
    status = EXIT_SUCCESS
    for f in args.files:
        try:
            results.append(agent.run(f))
        except OSError as e:
            get_logger().error("Cannot inspect %s: %s", f, e)
            results.append({"path": str(Path(f).absolute()), "error": f"{type(e).__name__}: {e}"})
            status = EXIT_FATAL
    print(json.dumps(results, indent=2))
    return status


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    setup_logging(debug=args.debug)
    try:
        if args.command == "inspect":
            return _run_inspect(args)
        return _run_scan(args)
    except OSError as e:
        get_logger().error("Fatal error: %s", e, exc_info=True)
        return EXIT_FATAL
