"""
strippers.py — per-format comment removal.

Every stripper takes the raw file bytes and returns new bytes:

  - Markup:      .html          (html5lib tree, comment nodes dropped)
  - Stylesheet:  .css           (/* */)
  - Script:      .js, .ts       (// and /* */)
  - YAML:        .yml, .yaml    (# to end of line)
  - Python:      .py            (tokenizer COMMENT tokens)

The pattern based strippers (stylesheet, script, YAML) do not track
string literals: a delimiter inside a quoted string is treated as a
comment like any other.
"""
from __future__ import annotations
import codecs
import io
import re
import tokenize
from typing import List, Tuple

from bs4 import BeautifulSoup, Comment, Tag


class MarkupParseError(ValueError):
    """Raised when a markup document cannot be decoded into text at all."""


# ----------------------------- Markup ----------------------------------

MARKUP_PARSER = "html5lib"


def _drop_comment_nodes(root: Tag) -> None:
    # depth-first; each child list is copied before anything is extracted
    pending = [root]
    while pending:
        node = pending.pop()
        for child in list(node.contents):
            if isinstance(child, Comment):
                child.extract()
            elif isinstance(child, Tag):
                pending.append(child)


def strip_markup(data: bytes, fragment: bool = False) -> bytes:
    """
    Parse *data* as an HTML document, remove every comment node and render it back.

    The parser builds a full document around fragments (<html><head></head><body>…).
    With fragment=True only the contents of <head> and <body> are rendered, which
    is what the composite splitter wants for a template section.
    A leading UTF-8 BOM is kept in front of the output.
    """
    bom = codecs.BOM_UTF8 if data.startswith(codecs.BOM_UTF8) else b""
    try:
        text = data[len(bom):].decode("utf-8")
    except UnicodeDecodeError as e:
        raise MarkupParseError(f"not valid UTF-8 text: {e}") from e

    soup = BeautifulSoup(text, MARKUP_PARSER)
    _drop_comment_nodes(soup)

    if not fragment:
        return bom + str(soup).encode("utf-8")

    parts: List[str] = []
    for section in (soup.head, soup.body):
        if section is not None:
            parts.extend(str(child) for child in section.contents)
    return bom + "".join(parts).encode("utf-8")


# ------------------------ Block / line comments -------------------------

_BLOCK_COMMENT_RE = re.compile(rb"/\*[\s\S]*?\*/")
# block form first so a // inside /* ... */ is consumed by the block match
_SCRIPT_COMMENT_RE = re.compile(rb"/\*[\s\S]*?\*/|//[^\r\n]*")
# YAML: '#' only opens a comment at line start or after blank space
_HASH_COMMENT_RE = re.compile(rb"(?:^|(?<=[ \t]))#[^\r\n]*", re.MULTILINE)


def strip_block_comments(data: bytes) -> bytes:
    """Remove /* ... */ comments. An unterminated /* is left as is."""
    return _BLOCK_COMMENT_RE.sub(b"", data)


def strip_script_comments(data: bytes) -> bytes:
    """Remove // line comments (keeping the line break) and /* ... */ blocks."""
    return _SCRIPT_COMMENT_RE.sub(b"", data)


def strip_hash_comments(data: bytes) -> bytes:
    return _HASH_COMMENT_RE.sub(b"", data)


def comment_spans(data: bytes, script: bool = True) -> List[Tuple[int, int]]:
    """Return the [start, end) byte ranges the block or script pattern would delete."""
    pattern = _SCRIPT_COMMENT_RE if script else _BLOCK_COMMENT_RE
    return [m.span() for m in pattern.finditer(data)]


# ------------------------------- Python ---------------------------------

_SHEBANG_RE = re.compile(r"^#!")
_PY_ENCODING_RE = re.compile(r"^[ \t\f]*#.*?coding[:=][ \t]*([-\w.]+)")


def _detect_python_encoding(data: bytes) -> str:
    try:
        encoding, _ = tokenize.detect_encoding(io.BytesIO(data).readline)
    except SyntaxError:
        return "utf-8"
    return encoding


def _is_header_comment(tok: tokenize.TokenInfo) -> bool:
    row = tok.start[0]
    if row == 1 and _SHEBANG_RE.match(tok.string):
        return True
    return row <= 2 and bool(_PY_ENCODING_RE.match(tok.line))


def _python_comment_tokens(text: str) -> List[tokenize.TokenInfo]:
    return [
        tok
        for tok in tokenize.generate_tokens(io.StringIO(text).readline)
        if tok.type == tokenize.COMMENT and not _is_header_comment(tok)
    ]


def strip_python_comments(data: bytes) -> bytes:
    """
    Remove '#' comments from Python source, keeping the shebang and coding cookie.

    Comment positions come from the tokenizer, so '#' inside strings is safe.
    Source the tokenizer rejects falls back to dropping whole-line comments.
    """
    encoding = _detect_python_encoding(data)
    try:
        text = data.decode(encoding)
    except (UnicodeDecodeError, LookupError):
        return data

    lines = io.StringIO(text).readlines()
    try:
        comments = _python_comment_tokens(text)
    except (tokenize.TokenError, SyntaxError):
        kept = [
            ln for idx, ln in enumerate(lines)
            if not ln.lstrip().startswith("#")
            or (idx == 0 and ln.startswith("#!"))
            or (idx < 2 and _PY_ENCODING_RE.match(ln))
        ]
        cleaned = "".join(kept)
        return data if cleaned == text else cleaned.encode(encoding)

    if not comments:
        return data

    # comments never span lines, so each one is a column range on its row
    for tok in reversed(comments):
        row, scol = tok.start
        _, ecol = tok.end
        line = lines[row - 1]
        lines[row - 1] = line[:scol] + line[ecol:]
    return "".join(lines).encode(encoding)
