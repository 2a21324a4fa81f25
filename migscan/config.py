"""
migscan/config.py
-----------------
Scan configuration: optional JSON file, overridden by explicit (CLI) values.

Config file keys
----------------
{
  "sourceDir": "/data/share",
  "maxSizeMb": 50,
  "outputFile": "scan-report.xlsx"
}
"""
from __future__ import annotations
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_MAX_SIZE_MB = 50
DEFAULT_OUTPUT_FILE = "scan-report.xlsx"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class ScanConfig:
    source_dir: Path
    max_size_mb: int = DEFAULT_MAX_SIZE_MB
    output_file: str = DEFAULT_OUTPUT_FILE


def load_config_file(path: str | Path) -> Dict[str, Any]:
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Failed to read config file: {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file: {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file must hold a JSON object: {path}")
    return data


def _blank(v: Any) -> bool:
    return v is None or (isinstance(v, str) and not v.strip())


def _parse_size(v: Any) -> int:
    if isinstance(v, bool):
        raise ConfigError(f"Invalid maxSizeMb: {v}")
    if isinstance(v, int):
        return v
    try:
        return int(str(v).strip())
    except ValueError:
        raise ConfigError(f"Invalid maxSizeMb: {v}") from None


def load_config(
    source: Optional[str] = None,
    max_size_mb: Optional[Any] = None,
    output_file: Optional[str] = None,
    config_path: Optional[str] = None,
) -> ScanConfig:
    """
    Resolve the scan configuration.  Explicit arguments win over the config
    file, which wins over the defaults.  Raises ConfigError.
    """
    file_values: Dict[str, Any] = load_config_file(config_path) if not _blank(config_path) else {}

    src = source if not _blank(source) else file_values.get("sourceDir")
    if _blank(src):
        raise ConfigError("--source not provided and not found in config file")
    source_dir = Path(str(src)).expanduser().resolve()
    if not source_dir.is_dir():
        raise ConfigError(f"Source directory does not exist: {source_dir}")

    size = max_size_mb if not _blank(max_size_mb) else file_values.get("maxSizeMb")
    size_mb = DEFAULT_MAX_SIZE_MB if _blank(size) else _parse_size(size)

    out = output_file if not _blank(output_file) else file_values.get("outputFile")
    if _blank(out):
        out = DEFAULT_OUTPUT_FILE

    return ScanConfig(source_dir=source_dir, max_size_mb=size_mb, output_file=str(out))
