"""
tests/test_scanner.py
---------------------
Records, rule checks, summary, report rows, configuration and the directory
scanner end to end.

Test matrix
-----------
  V1  path length / special chars / size     → one issue string per rule
  M1  DOCX / XLSX metadata                   → Pages= / Author= / Sheets= / encrypted
  M2  unreadable container                   → "Metadata parse failed", scan continues
  S1  summary                                → totals, "(none)", count desc then name
  P1  report rows                            → header, 2-decimal size, blank separator row
  C1  config precedence                      → argument > file > default
  A1  unreadable file                        → "Inaccessible: <ErrorClass>" record
"""
from __future__ import annotations
import json
import pathlib
import re

import openpyxl
import pytest

from migscan.config import ConfigError, ScanConfig, load_config, load_config_file
from migscan.inspector import DocxInspection, XlsxInspection
from migscan.records import (
    FileRecord,
    docx_issues,
    extension_of,
    find_specials,
    validate,
    xlsx_issues,
)
from migscan.report import INVENTORY_HEADER, inventory_rows, summary_rows, write_report
from migscan.scanner import fallback_record, scan
from migscan.summary import Summary

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$")


def _record(name: str = "a.txt", path: str | None = None) -> FileRecord:
    return FileRecord(path=path or f"/data/{name}", filename=name, extension=extension_of(name))


def _by_name(result) -> dict:
    return {r.filename: r for r in result.records}


# ─────────────────────────── records / rules ────────────────────────────

@pytest.mark.parametrize("name, ext", [
    ("report.docx", "DOCX"),
    ("archive.tar.gz", "GZ"),
    ("README", ""),
    ("trailing.", ""),
    (".bashrc", "BASHRC"),
])
def test_extension_of(name, ext):
    assert extension_of(name) == ext


def test_v1_path_length():
    rec = _record(path="/" + "x" * 250)
    validate(rec, 0, 50)
    assert rec.issues == ["Path length > 250"]

    ok = _record(path="/" + "x" * 249)
    validate(ok, 0, 50)
    assert ok.issues == []


def test_v1_special_chars_in_order_of_appearance():
    assert find_specials('a<b>c:"d|e?f*') == '<>:"|?*'
    rec = _record("bad?name*.txt")
    validate(rec, 0, 50)
    assert rec.issues == ["Special chars in name: ?*"]


def test_v1_size_threshold_is_strict():
    at_limit = _record()
    validate(at_limit, 50 * 1024 * 1024, 50)
    assert at_limit.issues == []

    over = _record()
    validate(over, 50 * 1024 * 1024 + 1, 50)
    assert over.issues == ["Size > 50MB"]


def test_m1_docx_issue_strings():
    assert docx_issues(DocxInspection(author="Jane", pages=3)) == ["Pages=3", "Author='Jane'"]
    assert docx_issues(DocxInspection(encrypted=True)) == ["Password-protected or encrypted"]
    assert docx_issues(DocxInspection(author="  ")) == []


def test_m1_xlsx_issue_strings():
    assert xlsx_issues(XlsxInspection(sheet_count=2)) == ["Sheets=2"]
    assert xlsx_issues(XlsxInspection(sheet_count=0, encrypted=True)) == [
        "Password-protected or encrypted", "Sheets=0",
    ]


# ─────────────────────────── summary ────────────────────────────

def test_s1_summary_counts():
    records = [_record("a.txt"), _record("b.txt"), _record("c.docx"), _record("Makefile"), _record("d.pdf")]
    records[2].issues.append("Pages=1")
    s = Summary.from_records(records, 3 * 1024 * 1024)
    assert s.total_files == 5
    assert s.total_size_mb == pytest.approx(3.0)
    assert s.files_with_issues == 1
    assert list(s.count_by_type.items()) == [("TXT", 2), ("(none)", 1), ("DOCX", 1), ("PDF", 1)]


def test_s1_empty_summary():
    s = Summary.from_records([], 0)
    assert s.to_dict() == {"total_files": 0, "total_size_mb": 0.0, "files_with_issues": 0, "count_by_type": {}}


# ─────────────────────────── report rows ────────────────────────────

def test_p1_inventory_rows():
    rec = FileRecord("/d/a.docx", "a.docx", "DOCX", 1.234567, "2024-01-01 10:00:00",
                     "2024-01-02 11:00:00", ["Pages=2", "Author='X'"])
    unknown = FileRecord("/d/b", "b", "", issues=["Inaccessible: PermissionError"])
    rows = inventory_rows([rec, unknown])
    assert rows[0] == INVENTORY_HEADER
    assert rows[1] == ["/d/a.docx", "a.docx", "1.23", "DOCX", "2024-01-01 10:00:00",
                       "2024-01-02 11:00:00", "Pages=2; Author='X'"]
    assert rows[2][2] == ""
    assert rows[2][6] == "Inaccessible: PermissionError"


def test_p1_summary_rows():
    s = Summary(total_files=3, total_size_mb=0.5, files_with_issues=1, count_by_type={"TXT": 2, "DOCX": 1})
    assert summary_rows(s) == [
        ["Metric", "Value"],
        ["Total files scanned", 3],
        ["Total size (MB)", "0.50"],
        ["Files with issues", 1],
        [],
        ["Type", "Count"],
        ["TXT", 2],
        ["DOCX", 1],
    ]


def test_p1_write_report_readable(tmp_path):
    s = Summary(total_files=1, total_size_mb=0.0, files_with_issues=0, count_by_type={"TXT": 1})
    out = write_report([_record("a.txt")], s, tmp_path / "r.xlsx")
    wb = openpyxl.load_workbook(out)
    assert wb.sheetnames == ["File Inventory", "Summary"]
    assert [c.value for c in wb["File Inventory"][1]] == INVENTORY_HEADER
    assert wb["Summary"]["A7"].value == "TXT"


# ─────────────────────────── config ────────────────────────────

def test_c1_defaults(tmp_path):
    cfg = load_config(source=str(tmp_path))
    assert cfg == ScanConfig(source_dir=tmp_path.resolve(), max_size_mb=50, output_file="scan-report.xlsx")


def test_c1_file_values_and_overrides(tmp_path):
    src = tmp_path / "share"
    src.mkdir()
    conf = tmp_path / "scan.json"
    conf.write_text(json.dumps({"sourceDir": str(src), "maxSizeMb": "10", "outputFile": "from-file.xlsx"}))

    from_file = load_config(config_path=str(conf))
    assert from_file.source_dir == src.resolve()
    assert from_file.max_size_mb == 10
    assert from_file.output_file == "from-file.xlsx"

    overridden = load_config(source=str(tmp_path), max_size_mb="5", output_file="cli.xlsx", config_path=str(conf))
    assert overridden.source_dir == tmp_path.resolve()
    assert overridden.max_size_mb == 5
    assert overridden.output_file == "cli.xlsx"


@pytest.mark.parametrize("kwargs", [
    {},
    {"source": "   "},
    {"source": "/definitely/not/a/dir/anywhere"},
])
def test_c1_bad_source(kwargs):
    with pytest.raises(ConfigError):
        load_config(**kwargs)


@pytest.mark.parametrize("size", ["big", "1.5", True])
def test_c1_bad_size(tmp_path, size):
    with pytest.raises(ConfigError):
        load_config(source=str(tmp_path), max_size_mb=size)


def test_c1_bad_config_files(tmp_path):
    with pytest.raises(ConfigError):
        load_config_file(tmp_path / "missing.json")
    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    with pytest.raises(ConfigError):
        load_config_file(broken)
    listed = tmp_path / "list.json"
    listed.write_text("[1, 2]")
    with pytest.raises(ConfigError):
        load_config_file(listed)


# ─────────────────────────── scanner ────────────────────────────

@pytest.fixture()
def share(tmp_path, docx_bytes, xlsx_bytes):
    root = tmp_path / "share"
    (root / "sub").mkdir(parents=True)
    (root / "notes.txt").write_text("hello")
    (root / "empty.log").write_bytes(b"")
    (root / "bad?name.txt").write_text("x")
    (root / "plan.docx").write_bytes(docx_bytes)
    (root / "sub" / "book.xlsx").write_bytes(xlsx_bytes)
    (root / "sub" / "broken.xlsx").write_bytes(b"this is not a zip")
    (root / "sub" / "Makefile").write_text("all:")
    return root


def test_scan_inventory(share):
    result = scan(ScanConfig(source_dir=share, max_size_mb=50))
    recs = _by_name(result)
    assert set(recs) == {"notes.txt", "empty.log", "bad?name.txt", "plan.docx", "book.xlsx", "broken.xlsx", "Makefile"}
    assert result.total_size_bytes == sum(p.stat().st_size for p in share.rglob("*") if p.is_file())

    assert recs["notes.txt"].issues == []
    assert recs["notes.txt"].extension == "TXT"
    assert recs["Makefile"].extension == ""
    assert recs["bad?name.txt"].issues == ["Special chars in name: ?"]
    assert recs["plan.docx"].issues == ["Pages=12", "Author='Jane Doe'"]
    assert recs["book.xlsx"].issues == ["Sheets=3"]
    assert recs["notes.txt"].path == str(share / "notes.txt")

    for r in result.records:
        assert DATE_RE.match(r.created)
        assert DATE_RE.match(r.modified)
        assert r.size_mb >= 0


def test_m2_malformed_container_does_not_abort(share, caplog):
    result = scan(ScanConfig(source_dir=share))
    assert _by_name(result)["broken.xlsx"].issues == ["Metadata parse failed"]
    assert "Metadata parse failed" in caplog.text
    assert len(result.records) == 7


def test_scan_size_threshold_zero(share):
    recs = _by_name(scan(ScanConfig(source_dir=share, max_size_mb=0)))
    assert "Size > 0MB" in recs["notes.txt"].issues
    assert "Size > 0MB" not in recs["empty.log"].issues


def test_scan_summary(share):
    s = scan(ScanConfig(source_dir=share)).summary()
    assert s.total_files == 7
    assert s.files_with_issues == 4
    assert list(s.count_by_type)[:2] == ["TXT", "XLSX"]
    assert s.count_by_type["(none)"] == 1


def test_scan_empty_directory(tmp_path):
    result = scan(ScanConfig(source_dir=tmp_path))
    assert result.records == []
    assert result.total_size_bytes == 0


def test_a1_unstattable_file_gets_fallback_record(share, monkeypatch):
    real_stat = pathlib.Path.stat

    def _stat(self, *args, **kwargs):
        if self.name == "notes.txt":
            raise PermissionError(13, "Permission denied", str(self))
        return real_stat(self, *args, **kwargs)

    monkeypatch.setattr(pathlib.Path, "stat", _stat)
    recs = _by_name(scan(ScanConfig(source_dir=share)))
    assert recs["notes.txt"].issues == ["Inaccessible: PermissionError"]
    assert recs["notes.txt"].size_mb == -1
    assert recs["notes.txt"].created == ""
    assert recs["plan.docx"].issues == ["Pages=12", "Author='Jane Doe'"]


def test_a1_fallback_record_fields(tmp_path):
    rec = fallback_record(tmp_path / "gone.pdf", FileNotFoundError())
    assert rec.filename == "gone.pdf"
    assert rec.extension == "PDF"
    assert rec.issues == ["Inaccessible: FileNotFoundError"]
