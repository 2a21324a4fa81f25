"""
migscan/archive.py
------------------
Archive Scanner: walk the entries of a ZIP-format byte stream in archive order.

The whole source is materialised into memory first; entries are then handed
out one at a time and their content is decompressed only when asked for.
Name comparison is case-insensitive because real-world OOXML producers do
not agree on casing.
"""
from __future__ import annotations
import io
import logging
import os
import zipfile
import zlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Iterator, Union

log = logging.getLogger(__name__)

Source = Union[bytes, bytearray, memoryview, str, "os.PathLike[str]", BinaryIO]

# Errors zipfile raises for a damaged or unreadable member.
_ENTRY_ERRORS = (zipfile.BadZipFile, zlib.error, EOFError, RuntimeError)


class MalformedArchive(OSError):
    """The byte buffer is not a readable ZIP container."""


@dataclass
class ArchiveEntry:
    name: str
    size: int
    _zip: zipfile.ZipFile = field(repr=False)
    _info: zipfile.ZipInfo = field(repr=False)
    consumed: bool = False

    def matches(self, *names: str) -> bool:
        """True if this entry's name equals any of *names*, ignoring case."""
        lowered = self.name.lower()
        return any(lowered == n.lower() for n in names)

    def read(self) -> bytes:
        """Decompress and return the entry content; marks the entry consumed."""
        try:
            data = self._zip.read(self._info)
        except _ENTRY_ERRORS as e:
            raise MalformedArchive(f"cannot read entry {self.name!r}: {e}") from e
        self.consumed = True
        return data


def read_source(source: Source) -> bytes:
    """
    Materialise *source* as bytes.  Accepts raw bytes, a filesystem path or a
    readable binary file object.  OSError from opening a path propagates.
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)
    if isinstance(source, (str, os.PathLike)):
        return Path(source).read_bytes()
    if hasattr(source, "read"):
        return source.read()
    raise TypeError(f"unsupported archive source: {type(source).__name__}")


def open_zip(data: bytes) -> zipfile.ZipFile:
    """Open *data* as a ZIP; raises MalformedArchive if it is not one."""
    try:
        return zipfile.ZipFile(io.BytesIO(data), "r")
    except (zipfile.BadZipFile, zipfile.LargeZipFile, ValueError) as e:
        raise MalformedArchive(f"not a ZIP container: {e}") from e


def iter_entries(source: Source) -> Iterator[ArchiveEntry]:
    """
    Yield every entry of the archive once, in archive order.
    Single pass: re-scanning means calling iter_entries() again.
    The underlying ZipFile is closed when the generator finishes or is closed.
    """
    data = read_source(source)
    with open_zip(data) as z:
        log.debug("scanning archive: %d bytes, %d entries", len(data), len(z.infolist()))
        for info in z.infolist():
            if info.is_dir():
                continue
            yield ArchiveEntry(name=info.filename, size=info.file_size, _zip=z, _info=info)
