"""Remove comments from HTML, CSS, JavaScript, TypeScript and Vue files."""
from .composite import strip_composite
from .formats import FormatTag, SourceDocument, build_format_table, dispatch, needs_processing
from .strippers import (
    MarkupParseError,
    strip_block_comments,
    strip_hash_comments,
    strip_markup,
    strip_python_comments,
    strip_script_comments,
)

__version__ = "1.0.0"
