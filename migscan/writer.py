"""
migscan/writer.py
-----------------
Package Writer: serialise sheets of cells into a minimal SpreadsheetML
package (.xlsx) without any document-processing library.

Parts, in archive order
-----------------------
  [Content_Types].xml
  _rels/.rels
  docProps/core.xml
  docProps/app.xml
  xl/workbook.xml
  xl/_rels/workbook.xml.rels
  xl/worksheets/sheet{n}.xml      one per sheet, n = 1-based position

Sheet n is declared in xl/workbook.xml with sheetId="n" and r:id="rId{n}",
and rId{n} in xl/_rels/workbook.xml.rels targets worksheets/sheet{n}.xml.
No styles, shared strings or formulas are written.
"""
from __future__ import annotations
import datetime
import io
import logging
import os
import stat
import tempfile
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from migscan.grid import Sheet, SheetsInput, to_sheets
from migscan.markup import escape_attr, escape_text, strip_illegal_xml_chars

log = logging.getLogger(__name__)

XML_DECL = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'

# Namespaces
NS_CONTENT_TYPES = "http://schemas.openxmlformats.org/package/2006/content-types"
NS_PKG_RELS = "http://schemas.openxmlformats.org/package/2006/relationships"
NS_CORE_PROPS = "http://schemas.openxmlformats.org/package/2006/metadata/core-properties"
NS_EXT_PROPS = "http://schemas.openxmlformats.org/officeDocument/2006/extended-properties"
NS_VTYPES = "http://schemas.openxmlformats.org/officeDocument/2006/docPropsVTypes"
NS_SPREADSHEETML = "http://schemas.openxmlformats.org/spreadsheetml/2006/main"
NS_OFFICE_RELS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"

# Content types
CT_RELS = "application/vnd.openxmlformats-package.relationships+xml"
CT_XML = "application/xml"
CT_WORKBOOK = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet.main+xml"
CT_WORKSHEET = "application/vnd.openxmlformats-officedocument.spreadsheetml.worksheet+xml"
CT_CORE_PROPS = "application/vnd.openxmlformats-package.core-properties+xml"
CT_EXT_PROPS = "application/vnd.openxmlformats-officedocument.extended-properties+xml"

# Relationship types
REL_OFFICE_DOCUMENT = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument"
REL_CORE_PROPS = "http://schemas.openxmlformats.org/package/2006/relationships/metadata/core-properties"
REL_EXT_PROPS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/extended-properties"
REL_WORKSHEET = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/worksheet"

Part = Tuple[str, bytes]


@dataclass(frozen=True)
class PackageProperties:
    title: str = "Data Migration Quality Report"
    creator: str = "DataMigrationScanner"
    application: str = "DataMigrationScanner"
    app_version: str = "1.0"


def sheet_part(n: int) -> str:
    return f"xl/worksheets/sheet{n}.xml"


def _w3cdtf(now: datetime.datetime) -> str:
    return now.astimezone(datetime.timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _target_mode(out: Path) -> int:
    """Permission bits for *out*: kept from an existing file, else 0666 under the umask."""
    try:
        return stat.S_IMODE(out.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


# ─────────────────────────── part builders ────────────────────────────

def content_types_xml(sheet_count: int) -> str:
    overrides = [f'<Override PartName="/xl/workbook.xml" ContentType="{CT_WORKBOOK}"/>']
    overrides += [
        f'<Override PartName="/{sheet_part(n)}" ContentType="{CT_WORKSHEET}"/>'
        for n in range(1, sheet_count + 1)
    ]
    overrides += [
        f'<Override PartName="/docProps/core.xml" ContentType="{CT_CORE_PROPS}"/>',
        f'<Override PartName="/docProps/app.xml" ContentType="{CT_EXT_PROPS}"/>',
    ]
    return (
        XML_DECL
        + f'<Types xmlns="{NS_CONTENT_TYPES}">'
        + f'<Default Extension="rels" ContentType="{CT_RELS}"/>'
        + f'<Default Extension="xml" ContentType="{CT_XML}"/>'
        + "".join(overrides)
        + "</Types>"
    )


def root_rels_xml() -> str:
    return (
        XML_DECL
        + f'<Relationships xmlns="{NS_PKG_RELS}">'
        + f'<Relationship Id="rId1" Type="{REL_OFFICE_DOCUMENT}" Target="xl/workbook.xml"/>'
        + f'<Relationship Id="rId2" Type="{REL_CORE_PROPS}" Target="docProps/core.xml"/>'
        + f'<Relationship Id="rId3" Type="{REL_EXT_PROPS}" Target="docProps/app.xml"/>'
        + "</Relationships>"
    )


def core_props_xml(props: PackageProperties, now: datetime.datetime) -> str:
    stamp = _w3cdtf(now)
    return (
        XML_DECL
        + f'<cp:coreProperties xmlns:cp="{NS_CORE_PROPS}" '
        'xmlns:dc="http://purl.org/dc/elements/1.1/" '
        'xmlns:dcterms="http://purl.org/dc/terms/" '
        'xmlns:dcmitype="http://purl.org/dc/dcmitype/" '
        'xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">'
        + f"<dc:title>{escape_text(props.title)}</dc:title>"
        + f"<dc:creator>{escape_text(props.creator)}</dc:creator>"
        + f"<cp:lastModifiedBy>{escape_text(props.creator)}</cp:lastModifiedBy>"
        + f'<dcterms:created xsi:type="dcterms:W3CDTF">{stamp}</dcterms:created>'
        + f'<dcterms:modified xsi:type="dcterms:W3CDTF">{stamp}</dcterms:modified>'
        + "</cp:coreProperties>"
    )


def app_props_xml(props: PackageProperties) -> str:
    # DocSecurity stays 0: the writer never applies OOXML-level protection.
    return (
        XML_DECL
        + f'<Properties xmlns="{NS_EXT_PROPS}" xmlns:vt="{NS_VTYPES}">'
        + f"<Application>{escape_text(props.application)}</Application>"
        + "<DocSecurity>0</DocSecurity>"
        + f"<AppVersion>{escape_text(props.app_version)}</AppVersion>"
        + "</Properties>"
    )


def workbook_xml(sheets: List[Sheet]) -> str:
    entries = "".join(
        f'<sheet name="{escape_attr(strip_illegal_xml_chars(s.name))}" sheetId="{n}" r:id="rId{n}"/>'
        for n, s in enumerate(sheets, start=1)
    )
    return (
        XML_DECL
        + f'<workbook xmlns="{NS_SPREADSHEETML}" xmlns:r="{NS_OFFICE_RELS}">'
        + f"<sheets>{entries}</sheets>"
        + "</workbook>"
    )


def workbook_rels_xml(sheet_count: int) -> str:
    rels = "".join(
        f'<Relationship Id="rId{n}" Type="{REL_WORKSHEET}" Target="worksheets/sheet{n}.xml"/>'
        for n in range(1, sheet_count + 1)
    )
    return XML_DECL + f'<Relationships xmlns="{NS_PKG_RELS}">{rels}</Relationships>'


def worksheet_xml(sheet: Sheet) -> str:
    return (
        XML_DECL
        + f'<worksheet xmlns="{NS_SPREADSHEETML}">'
        + f'<dimension ref="{sheet.dimension}"/>'
        + "<sheetData>"
        + "".join(sheet.iter_rendered_rows())
        + "</sheetData>"
        + "</worksheet>"
    )


# ─────────────────────────── assembly ────────────────────────────

def build_parts(
    sheets: SheetsInput,
    properties: Optional[PackageProperties] = None,
    now: Optional[datetime.datetime] = None,
) -> List[Part]:
    """Every part of the package as (part name, UTF-8 bytes), in archive order."""
    sheet_list = to_sheets(sheets)
    if not sheet_list:
        raise ValueError("a workbook needs at least one sheet")
    props = properties or PackageProperties()
    now = now or datetime.datetime.now(datetime.timezone.utc)
    n = len(sheet_list)

    parts: List[Tuple[str, str]] = [
        ("[Content_Types].xml", content_types_xml(n)),
        ("_rels/.rels", root_rels_xml()),
        ("docProps/core.xml", core_props_xml(props, now)),
        ("docProps/app.xml", app_props_xml(props)),
        ("xl/workbook.xml", workbook_xml(sheet_list)),
        ("xl/_rels/workbook.xml.rels", workbook_rels_xml(n)),
    ]
    parts += [(sheet_part(i), worksheet_xml(s)) for i, s in enumerate(sheet_list, start=1)]
    return [(name, xml.encode("utf-8")) for name, xml in parts]


def build_package(
    sheets: SheetsInput,
    properties: Optional[PackageProperties] = None,
    now: Optional[datetime.datetime] = None,
) -> bytes:
    """Serialise *sheets* into the bytes of a complete .xlsx package."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zout:
        for name, data in build_parts(sheets, properties, now):
            zout.writestr(name, data)
    return buf.getvalue()


def write_workbook(
    sheets: SheetsInput,
    destination: str | os.PathLike,
    properties: Optional[PackageProperties] = None,
) -> Path:
    """
    Write the package to *destination* and return its path.

    The bytes go to a temporary file in the destination directory, which is
    renamed over *destination* only once it is complete; on failure nothing
    is left behind and the OSError propagates.  The file keeps the mode of
    the one it replaces; a new file gets the umask default.
    """
    out = Path(destination).absolute()
    data = build_package(sheets, properties)
    fd, tmp = tempfile.mkstemp(prefix=f".{out.name}.", suffix=".tmp", dir=out.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.chmod(tmp, _target_mode(out))
        os.replace(tmp, out)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise
    log.debug("wrote %s (%d bytes)", out, len(data))
    return out
