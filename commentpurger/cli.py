"""
cli.py — remove comments from source files in place.

Supported (by extension):
  - HTML:        .html              (<!-- -->, parsed with html5lib)
  - CSS:         .css               (/* */)
  - JavaScript:  .js                (//, /* */)
  - TypeScript:  .ts                (same as JS)
  - Vue:         .vue               (template/script/style handled separately)
  - YAML:        .yml, .yaml        (# comments; with --include-yaml)
  - Python:      .py                (tokenizer; with --include-python)

Every other file is left alone and never opened.

Usage:
  commentpurger <path> [<path> ...] [--config FILE] [--include-python]
                [--include-yaml] [--exclude GLOB] [--jobs N] [--verbose]

Examples:
  # Clean a whole front-end tree
  commentpurger src

  # Clean two files and the YAML under deploy/, skipping vendored code
  commentpurger index.html app.vue deploy --include-yaml --exclude node_modules
"""
from __future__ import annotations
import argparse
import fnmatch
import os
import stat
import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from .config import ConfigError, PurgeOptions, load_config
from .formats import dispatch, needs_processing

CHANGED = "changed"
UNCHANGED = "unchanged"
SKIPPED = "skipped"
FAILED = "failed"


@dataclass
class PurgeStats:
    changed: int = 0
    unchanged: int = 0
    skipped: int = 0
    failed: int = 0

    def record(self, outcome: str) -> None:
        setattr(self, outcome, getattr(self, outcome) + 1)

    def summary(self) -> str:
        return (f"{self.changed} changed, {self.unchanged} unchanged, "
                f"{self.skipped} skipped, {self.failed} failed")


# ----------------------------- Walking ----------------------------------

def _report_error(msg: str) -> None:
    print(f"[ERROR] {msg}", file=sys.stderr)


def _is_excluded(name: str, patterns: Sequence[str]) -> bool:
    return any(fnmatch.fnmatch(name, pat) for pat in patterns)


def _walk_error(err: OSError) -> None:
    _report_error(f"Error walking path {err.filename}: {err.strerror or err}")


def iter_files(root: Path, exclude: Sequence[str] = ()) -> Iterable[Path]:
    """
    Yield every regular file under *root*. A file root is yielded as is.

    Unreadable roots and directories are reported and skipped.
    """
    try:
        st = root.stat()
    except OSError as e:
        _report_error(f"Error walking path {root}: {e.strerror or e}")
        return
    if stat.S_ISREG(st.st_mode):
        yield root
        return
    if not stat.S_ISDIR(st.st_mode):
        return
    for dirpath, dirnames, filenames in os.walk(root, onerror=_walk_error):
        dirnames[:] = sorted(d for d in dirnames if not _is_excluded(d, exclude))
        for name in sorted(filenames):
            if _is_excluded(name, exclude):
                continue
            path = Path(dirpath) / name
            if path.is_file():
                yield path


# ---------------------------- Processing --------------------------------

def process_file(path: Path, options: PurgeOptions) -> str:
    """Strip one file in place and return what happened to it."""
    if not needs_processing(path.name, options.table):
        if options.verbose:
            print(f"[skip] {path}")
        return SKIPPED

    try:
        content = path.read_bytes()
    except OSError as e:
        _report_error(f"Failed to read {path}: {e}")
        return FAILED

    try:
        new_content = dispatch(path.name, content, options.table)
    except Exception as e:
        _report_error(f"Failed to process {path}: {e}")
        return FAILED

    if new_content == content:
        if options.verbose:
            print(f"[{path.suffix}] {path} unchanged")
        return UNCHANGED

    # rewriting the existing file keeps its permission bits
    try:
        with open(path, "wb") as f:
            f.write(new_content)
    except OSError as e:
        _report_error(f"Failed to write {path}: {e}")
        return FAILED

    print(f"Removed comments from {path}")
    return CHANGED


def purge_paths(paths: Iterable[str], options: Optional[PurgeOptions] = None) -> PurgeStats:
    options = options or PurgeOptions()
    stats = PurgeStats()
    for root in paths:
        files = iter_files(Path(root), options.exclude)
        if options.jobs <= 1:
            for path in files:
                stats.record(process_file(path, options))
            continue
        with ThreadPoolExecutor(max_workers=options.jobs) as ex:
            futures = [ex.submit(process_file, path, options) for path in files]
            for fut in futures:
                stats.record(fut.result())
    return stats


# ------------------------------- Driver ---------------------------------

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="commentpurger",
        description="Remove comments from HTML, CSS, JavaScript, TypeScript and Vue files in place.",
    )
    ap.add_argument("paths", nargs="*", metavar="PATH", help="Files or directories to process.")
    ap.add_argument("--config", "-c", default=None,
                    help="YAML settings file (default: ./commentpurger.yml if present).")
    ap.add_argument("--include-python", action="store_true", default=None,
                    help="Also strip '#' comments from .py files.")
    ap.add_argument("--include-yaml", action="store_true", default=None,
                    help="Also strip '#' comments from .yml/.yaml files.")
    ap.add_argument("--exclude", action="append", default=None, metavar="GLOB",
                    help="Skip files and directories whose name matches GLOB (repeatable).")
    ap.add_argument("--jobs", "-j", type=int, default=None, help="Number of worker threads (default 1).")
    ap.add_argument("--verbose", "-v", action="store_true", default=None,
                    help="Report skipped and unchanged files and print a summary.")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    ap = build_parser()
    # argparse exits 2 on a bad flag; --help exits 0
    try:
        args = ap.parse_args(argv)
    except SystemExit as e:
        return 1 if e.code else 0
    if not args.paths:
        ap.print_usage(sys.stderr)
        print(f"{ap.prog}: error: at least one PATH is required", file=sys.stderr)
        return 1

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        _report_error(str(e))
        return 1

    for key in ("include_python", "include_yaml", "jobs", "verbose"):
        value = getattr(args, key)
        if value is not None:
            cfg[key] = value
    if args.exclude:
        cfg["exclude"] = list(cfg["exclude"]) + args.exclude
    if cfg["jobs"] < 1:
        _report_error("--jobs must be at least 1")
        return 1

    options = PurgeOptions.from_config(cfg)
    stats = purge_paths(args.paths, options)
    if options.verbose:
        print(f"Done: {stats.summary()}")
    return 0
