# Shared pytest fixtures: in-memory OOXML packages
from __future__ import annotations
import io
import zipfile

import pytest

from migscan.log import reset_logging

CORE_XML = (
    b'<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
    b'<cp:coreProperties xmlns:cp="http://schemas.openxmlformats.org/package/2006/metadata/core-properties" '
    b'xmlns:dc="http://purl.org/dc/elements/1.1/">'
    b"<dc:title>Quarterly plan</dc:title><dc:creator>Jane Doe</dc:creator>"
    b"</cp:coreProperties>"
)

APP_XML = (
    b'<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
    b'<Properties xmlns="http://schemas.openxmlformats.org/officeDocument/2006/extended-properties">'
    b"<Application>Microsoft Office Word</Application><Pages>12</Pages>"
    b"</Properties>"
)


def workbook_xml(*names: str) -> bytes:
    sheets = "".join(
        f'<sheet name="{n}" sheetId="{i}" r:id="rId{i}"/>' for i, n in enumerate(names, start=1)
    )
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        '<workbook xmlns="http://schemas.openxmlformats.org/spreadsheetml/2006/main" '
        'xmlns:r="http://schemas.openxmlformats.org/officeDocument/2006/relationships">'
        f"<sheets>{sheets}</sheets></workbook>"
    ).encode("utf-8")


def build_zip(parts: dict[str, bytes]) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as z:
        for name, data in parts.items():
            z.writestr(name, data)
    return buf.getvalue()


@pytest.fixture()
def make_zip():
    """Build a ZIP in memory from {entry name: bytes}, in the given order."""
    return build_zip


@pytest.fixture()
def docx_bytes() -> bytes:
    return build_zip({
        "[Content_Types].xml": b'<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types"/>',
        "word/document.xml": b"<w:document xmlns:w='urn:w'/>",
        "docProps/core.xml": CORE_XML,
        "docProps/app.xml": APP_XML,
    })


@pytest.fixture()
def xlsx_bytes() -> bytes:
    return build_zip({
        "[Content_Types].xml": b'<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types"/>',
        "xl/workbook.xml": workbook_xml("Data", "Lookup", "Notes"),
        "xl/worksheets/sheet1.xml": b"<worksheet/>",
    })


@pytest.fixture(autouse=True)
def _fresh_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def core_xml() -> bytes:
    return CORE_XML


@pytest.fixture()
def app_xml() -> bytes:
    return APP_XML


@pytest.fixture(name="workbook_xml")
def workbook_xml_fixture():
    """Build xl/workbook.xml declaring the given sheet names."""
    return workbook_xml
