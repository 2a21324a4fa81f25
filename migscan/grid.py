"""
migscan/grid.py
---------------
Cell Grid: the write-side data model.

Each source value is classified on its own (no column-wide inference) into
exactly one of three kinds, and each kind renders as exactly one <c> shape:

  empty   <c r="A1"/>
  number  <c r="A1"><v>3.5</v></c>
  text    <c r="A1" t="inlineStr"><is><t>A&amp;B</t></is></c>
          (<t xml:space="preserve"> when the text starts or ends with whitespace)
"""
from __future__ import annotations
import math
import numbers
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable, List, Mapping, Sequence, Union

from migscan.markup import cell_ref, col_name, escape_text, strip_illegal_xml_chars

EMPTY = "empty"
NUMBER = "number"
TEXT = "text"


@dataclass(frozen=True)
class Cell:
    kind: str  # "empty" | "number" | "text"
    value: str = ""  # number text or raw (unescaped) string; "" for empty

    def render(self, ref: str) -> str:
        if self.kind == EMPTY:
            return f'<c r="{ref}"/>'
        if self.kind == NUMBER:
            return f'<c r="{ref}"><v>{self.value}</v></c>'
        return f'<c r="{ref}" t="inlineStr"><is>{_inline_text(self.value)}</is></c>'


EMPTY_CELL = Cell(EMPTY)


def _inline_text(value: str) -> str:
    """
    <t> element for a text cell.  CR goes out as a character reference, since
    a literal one is read back as LF, and edge whitespace is marked preserved.
    """
    body = escape_text(value).replace("\r", "&#13;")
    if value != value.strip(" \t\r\n"):
        return f'<t xml:space="preserve">{body}</t>'
    return f"<t>{body}</t>"


def _number_text(value: Any) -> str | None:
    """Decimal text for a finite number, None if *value* is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, Decimal):
        return str(value) if value.is_finite() else None
    if isinstance(value, numbers.Real):
        f = float(value)
        return repr(f) if math.isfinite(f) else None
    return None


def classify(value: Any) -> Cell:
    if isinstance(value, Cell):
        return value
    if value is None or value == "":
        return EMPTY_CELL
    num = _number_text(value)
    if num is not None:
        return Cell(NUMBER, num)
    return Cell(TEXT, strip_illegal_xml_chars(str(value)))


@dataclass
class Sheet:
    name: str
    rows: List[List[Cell]] = field(default_factory=list)

    @classmethod
    def from_values(cls, name: str, rows: Iterable[Iterable[Any]]) -> "Sheet":
        return cls(name=name, rows=[[classify(v) for v in row] for row in rows])

    def append(self, *values: Any) -> None:
        self.rows.append([classify(v) for v in values])

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return max((len(r) for r in self.rows), default=0)

    @property
    def dimension(self) -> str:
        """Declared range; a sheet with no cells is "A1", as spreadsheet apps write it."""
        if not self.row_count or not self.column_count:
            return "A1"
        return f"A1:{col_name(self.column_count)}{self.row_count}"

    def iter_rendered_rows(self) -> Iterable[str]:
        for r, row in enumerate(self.rows, start=1):
            cells = "".join(cell.render(cell_ref(c, r)) for c, cell in enumerate(row, start=1))
            yield f'<row r="{r}">{cells}</row>'


SheetsInput = Union[Mapping[str, Sequence[Sequence[Any]]], Iterable[Sheet]]


def to_sheets(sheets: SheetsInput) -> List[Sheet]:
    """
    Normalise the writer input: a mapping of sheet name -> rows (order kept)
    or an iterable of Sheet objects.
    """
    if isinstance(sheets, Mapping):
        return [Sheet.from_values(name, rows) for name, rows in sheets.items()]
    return [s if isinstance(s, Sheet) else Sheet.from_values(*s) for s in sheets]
