"""
formats.py — map file names to comment strippers.

The suffix table is built once by build_format_table() and handed to every
call; it is a read-only mapping so nothing can change it mid-run.
"""
from __future__ import annotations
import enum
import os
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, Mapping

from .composite import strip_composite
from .strippers import (
    strip_block_comments,
    strip_hash_comments,
    strip_markup,
    strip_python_comments,
    strip_script_comments,
)


class FormatTag(enum.Enum):
    MARKUP = "markup"
    STYLESHEET = "stylesheet"
    SCRIPT = "script"
    COMPOSITE = "composite"
    YAML = "yaml"
    PYTHON = "python"
    PLAIN = "plain"


FormatTable = Mapping[str, FormatTag]

BASE_FORMATS: Dict[str, FormatTag] = {
    ".html": FormatTag.MARKUP,
    ".css": FormatTag.STYLESHEET,
    ".js": FormatTag.SCRIPT,
    ".ts": FormatTag.SCRIPT,
    ".vue": FormatTag.COMPOSITE,
}
PYTHON_FORMATS: Dict[str, FormatTag] = {".py": FormatTag.PYTHON}
YAML_FORMATS: Dict[str, FormatTag] = {".yml": FormatTag.YAML, ".yaml": FormatTag.YAML}

_STRIPPERS: Dict[FormatTag, Callable[[bytes], bytes]] = {
    FormatTag.MARKUP: strip_markup,
    FormatTag.STYLESHEET: strip_block_comments,
    FormatTag.SCRIPT: strip_script_comments,
    FormatTag.COMPOSITE: strip_composite,
    FormatTag.YAML: strip_hash_comments,
    FormatTag.PYTHON: strip_python_comments,
}


def build_format_table(include_python: bool = False, include_yaml: bool = False) -> FormatTable:
    table = dict(BASE_FORMATS)
    if include_python:
        table.update(PYTHON_FORMATS)
    if include_yaml:
        table.update(YAML_FORMATS)
    return MappingProxyType(table)


DEFAULT_FORMAT_TABLE = build_format_table()


def format_for(filename: str, table: FormatTable = DEFAULT_FORMAT_TABLE) -> FormatTag:
    """Case-sensitive lookup on the trailing extension; unknown suffixes are PLAIN."""
    ext = os.path.splitext(filename)[1]
    return table.get(ext, FormatTag.PLAIN)


def needs_processing(filename: str, table: FormatTable = DEFAULT_FORMAT_TABLE) -> bool:
    return format_for(filename, table) is not FormatTag.PLAIN


@dataclass(frozen=True)
class SourceDocument:
    name: str
    data: bytes
    fmt: FormatTag

    @classmethod
    def from_bytes(cls, name: str, data: bytes,
                   table: FormatTable = DEFAULT_FORMAT_TABLE) -> "SourceDocument":
        return cls(name, data, format_for(name, table))


def strip_document(doc: SourceDocument) -> bytes:
    """Run the stripper for doc.fmt. MarkupParseError from the markup stripper propagates."""
    stripper = _STRIPPERS.get(doc.fmt)
    if stripper is None:
        return doc.data
    return stripper(doc.data)


def dispatch(filename: str, data: bytes, table: FormatTable = DEFAULT_FORMAT_TABLE) -> bytes:
    return strip_document(SourceDocument.from_bytes(filename, data, table))
