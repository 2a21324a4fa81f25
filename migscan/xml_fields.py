"""
migscan/xml_fields.py
---------------------
XML Field Extractor: pull single scalar values out of a part's XML.

Metadata extraction is best-effort.  A buffer that fails to parse (malformed,
empty, bad encoding declaration) is reported as "not found" (None), never as
an exception, so one bad part cannot abort the inspection of a file.
"""
from __future__ import annotations
import logging
import re
from typing import Iterator, List, Optional
from xml.etree import ElementTree as ET
from xml.parsers import expat

log = logging.getLogger(__name__)

_INT_RE = re.compile(r"^[+-]?\d+$")


def parse_xml(data: bytes) -> Optional[ET.Element]:
    """Parse *data* namespace-aware; returns the root element or None."""
    if not data:
        return None
    try:
        return ET.fromstring(data)
    except (ET.ParseError, ValueError, LookupError) as e:
        log.debug("unparsable XML (%d bytes): %s: %s", len(data), type(e).__name__, e)
        return None


def local_name(tag: str) -> str:
    """'{ns}tag' -> 'tag'; unqualified tags are returned as-is."""
    return tag.rsplit("}", 1)[-1] if tag.startswith("{") else tag


def text_content(el: ET.Element) -> str:
    """All descendant text concatenated, like DOM textContent."""
    return "".join(el.itertext())


def _first(elements: Iterator[ET.Element]) -> Optional[str]:
    for el in elements:
        return text_content(el)
    return None


# ─────────────────────────── lookups on a parsed tree ────────────────────────

def find_namespaced(root: ET.Element, namespace: str, tag: str) -> Optional[str]:
    """Text of the first element named {namespace}tag, or None."""
    return _first(root.iter(f"{{{namespace}}}{tag}"))


def find_unqualified(root: ET.Element, tag: str) -> Optional[str]:
    """Text of the first element whose local name is *tag*, any namespace."""
    return _first(el for el in root.iter() if isinstance(el.tag, str) and local_name(el.tag) == tag)


def count_unqualified(root: ET.Element, tag: str) -> int:
    return sum(1 for el in root.iter() if isinstance(el.tag, str) and local_name(el.tag) == tag)


def parse_int(text: Optional[str]) -> Optional[int]:
    """Trimmed decimal integer, or None when *text* is not one."""
    if text is None:
        return None
    s = text.strip()
    if not _INT_RE.match(s):
        return None
    return int(s)


# ─────────────────────────── byte-level entry points ─────────────────────────

def find_literal(data: bytes, name: str) -> Optional[str]:
    """
    Text of the first element whose qualified name is literally *name*
    (e.g. 'dc:creator'), parsed without namespace processing.  Matches
    producers that use a prefix they never declared, which a namespace-aware
    parse rejects.
    """
    parser = expat.ParserCreate()
    depth = 0  # > 0 while inside the first match
    found = False
    parts: List[str] = []

    def start(tag, attrs):
        nonlocal depth, found
        if depth:
            depth += 1
        elif not found and tag == name:
            found = True
            depth = 1

    def end(tag):
        nonlocal depth
        if depth:
            depth -= 1

    def chars(text):
        if depth:
            parts.append(text)

    parser.StartElementHandler = start
    parser.EndElementHandler = end
    parser.CharacterDataHandler = chars
    try:
        parser.Parse(data, True)
    except (expat.ExpatError, ValueError, LookupError) as e:
        log.debug("unparsable XML (%d bytes) in literal lookup: %s", len(data), e)
        return None
    return "".join(parts) if found else None


def extract_text(
    data: bytes,
    namespace: str,
    tag: str,
    fallback: Optional[str] = None,
) -> Optional[str]:
    """
    Namespaced lookup of *tag* in *namespace*; when that yields nothing (or the
    buffer is not namespace-well-formed) and a *fallback* literal name is
    given, look that up instead.
    """
    if not data:
        return None
    root = parse_xml(data)
    found = find_namespaced(root, namespace, tag) if root is not None else None
    if found is None and fallback is not None:
        found = find_literal(data, fallback)
    return found


def extract_unqualified_text(data: bytes, tag: str) -> Optional[str]:
    root = parse_xml(data)
    if root is None:
        return None
    return find_unqualified(root, tag)


def extract_int(data: bytes, tag: str) -> Optional[int]:
    """Unqualified lookup of *tag* parsed as an integer; None if absent or not numeric."""
    value = parse_int(extract_unqualified_text(data, tag))
    if value is None:
        log.debug("no integer <%s> found", tag)
    return value


def count_elements(data: bytes, tag: str) -> Optional[int]:
    """Number of elements with local name *tag*; None when *data* does not parse."""
    root = parse_xml(data)
    if root is None:
        return None
    return count_unqualified(root, tag)
