"""
composite.py — comment removal for single-file components (.vue).

A component is split into its <template>, <script> and <style> sections;
each body goes through the matching stripper and the file is rebuilt in
the fixed order template, script, style. Each section is captured from its
first opening tag to its last closing tag, so repeated tags of one kind end
up inside a single section (a warning is printed when that happens).
"""
from __future__ import annotations
import re
import sys
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .strippers import (
    MarkupParseError,
    strip_block_comments,
    strip_markup,
    strip_script_comments,
)

SECTION_ORDER = ("template", "script", "style")

_SECTION_RES: Dict[str, "re.Pattern[bytes]"] = {
    "template": re.compile(rb"<template>(.*)</template>", re.DOTALL),
    "script": re.compile(rb"<script.*?>(.*)</script>", re.DOTALL),
    "style": re.compile(rb"<style.*?>(.*)</style>", re.DOTALL),
}

_OPEN_TAG_RES: Dict[str, "re.Pattern[bytes]"] = {
    "template": re.compile(rb"<template>"),
    "script": re.compile(rb"<script[\s>]"),
    "style": re.compile(rb"<style[\s>]"),
}


@dataclass(frozen=True)
class CompositeSection:
    kind: str
    open_tag: bytes
    body: bytes

    def render(self, body: Optional[bytes] = None) -> bytes:
        inner = self.body if body is None else body
        return self.open_tag + inner + b"</" + self.kind.encode("ascii") + b">\n"


def _warn(msg: str) -> None:
    print(f"[WARN] {msg}", file=sys.stderr)


def _strip_template(body: bytes) -> bytes:
    try:
        return strip_markup(body, fragment=True)
    except MarkupParseError as e:
        _warn(f"Could not remove comments from component template: {e}")
        return body


_BODY_STRIPPERS: Dict[str, Callable[[bytes], bytes]] = {
    "template": _strip_template,
    "script": strip_script_comments,
    "style": strip_block_comments,
}


def split_sections(data: bytes) -> List[CompositeSection]:
    """Return the sections found in *data*, in template/script/style order."""
    sections: List[CompositeSection] = []
    for kind in SECTION_ORDER:
        m = _SECTION_RES[kind].search(data)
        if m is None:
            continue
        if len(_OPEN_TAG_RES[kind].findall(data)) > 1:
            _warn(f"Several <{kind}> tags found; treating everything from the first "
                  f"<{kind}> to the last </{kind}> as one section")
        open_tag = data[m.start():m.start(1)]
        sections.append(CompositeSection(kind, open_tag, m.group(1)))
    return sections


def strip_composite(data: bytes) -> bytes:
    """Strip comments from every section and rebuild the component."""
    sections = split_sections(data)
    if not sections:
        return data
    return b"".join(s.render(_BODY_STRIPPERS[s.kind](s.body)) for s in sections)
