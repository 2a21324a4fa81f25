"""
migscan/markup.py
-----------------
Cell addressing and the two XML escaping rules used by the package writer.

escape_attr() and escape_text() are NOT interchangeable: attribute values
also escape double quotes, text content does not.
"""
from __future__ import annotations
import re

# XML 1.0 forbids control characters other than TAB, LF and CR.
_ILLEGAL_XML_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def col_name(n: int) -> str:
    """
    1-based column number to spreadsheet letters (bijective base 26):
    1 -> A, 26 -> Z, 27 -> AA, 52 -> AZ, 53 -> BA.  col_name(0) == "".
    """
    if n < 0:
        raise ValueError(f"column number must be >= 0, got {n}")
    s = ""
    while n:
        n, r = divmod(n - 1, 26)
        s = chr(65 + r) + s
    return s


def cell_ref(col: int, row: int) -> str:
    """1-based column and row to an A1-style address."""
    return f"{col_name(col)}{row}"


def escape_attr(s: str) -> str:
    return s.replace("&", "&amp;").replace('"', "&quot;").replace("<", "&lt;").replace(">", "&gt;")


def escape_text(s: str) -> str:
    return s.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def strip_illegal_xml_chars(s: str) -> str:
    """Drop characters that cannot appear in an XML 1.0 document at all."""
    return _ILLEGAL_XML_CHARS.sub("", s)
