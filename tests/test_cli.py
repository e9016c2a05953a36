import os
import stat
from pathlib import Path

import pytest

from commentpurger import cli
from commentpurger.cli import SKIPPED, iter_files, main, process_file, purge_paths
from commentpurger.config import PurgeOptions
from commentpurger.formats import build_format_table

TEST_FILES = {
    "test.js": b"// js comment\nconsole.log('hello');",
    "test.html": b"<!-- html comment --><p>hello</p>",
    "test.css": b"/* css comment */ body {}",
    "ignored.txt": b"this file should be ignored // really",
}


@pytest.fixture
def project(tmp_path, monkeypatch):
    # keep a stray commentpurger.yml in the real cwd out of the picture
    monkeypatch.chdir(tmp_path)
    root = tmp_path / "src"
    root.mkdir()
    for name, content in TEST_FILES.items():
        (root / name).write_bytes(content)
    return root


def test_run_over_directory(project, capsys):
    assert main([str(project)]) == 0

    assert (project / "test.js").read_bytes() == b"\nconsole.log('hello');"
    html = (project / "test.html").read_bytes()
    assert b"<body><p>hello</p></body>" in html and b"<!--" not in html
    assert (project / "test.css").read_bytes() == b" body {}"
    assert (project / "ignored.txt").read_bytes() == TEST_FILES["ignored.txt"]

    out = capsys.readouterr().out
    assert f"Removed comments from {project / 'test.js'}" in out
    assert "ignored.txt" not in out


def test_second_run_changes_nothing(project, capsys):
    main([str(project)])
    capsys.readouterr()
    stats = purge_paths([str(project)])
    assert stats.changed == 0
    assert stats.unchanged == 3
    assert stats.skipped == 1
    assert "Removed comments" not in capsys.readouterr().out


def test_nested_directories_and_file_roots(project):
    nested = project / "a" / "b"
    nested.mkdir(parents=True)
    (nested / "deep.ts").write_bytes(b"let a = 1; // x\n")
    single = project.parent / "single.css"
    single.write_bytes(b"/* x */a{}")

    stats = purge_paths([str(project), str(single)])

    assert (nested / "deep.ts").read_bytes() == b"let a = 1; \n"
    assert single.read_bytes() == b"a{}"
    assert stats.changed == 5


def test_unrecognized_file_is_never_opened(tmp_path):
    # the file does not exist, so any attempt to read it would fail
    assert process_file(tmp_path / "missing.txt", PurgeOptions()) == SKIPPED


def test_permission_bits_are_kept(project):
    target = project / "test.js"
    os.chmod(target, 0o640)
    main([str(target)])
    assert stat.S_IMODE(os.stat(target).st_mode) == 0o640
    assert target.read_bytes() == b"\nconsole.log('hello');"


def test_missing_root_is_reported_and_others_continue(project, capsys):
    missing = project.parent / "does-not-exist"
    assert main([str(missing), str(project)]) == 0
    err = capsys.readouterr().err
    assert f"[ERROR] Error walking path {missing}" in err
    assert (project / "test.css").read_bytes() == b" body {}"


def test_markup_error_skips_file_only(project, capsys):
    bad = project / "bad.html"
    bad.write_bytes(b"\xff<!-- c -->")
    assert main([str(project)]) == 0
    assert bad.read_bytes() == b"\xff<!-- c -->"
    assert f"[ERROR] Failed to process {bad}" in capsys.readouterr().err
    assert (project / "test.js").read_bytes() == b"\nconsole.log('hello');"


def test_no_paths_is_an_invalid_invocation(capsys):
    assert main([]) == 1
    assert "usage:" in capsys.readouterr().err


def test_bad_config_is_an_invalid_invocation(project, capsys):
    assert main(["--config", str(project / "nope.yml"), str(project)]) == 1
    assert "[ERROR]" in capsys.readouterr().err
    assert (project / "test.js").read_bytes() == TEST_FILES["test.js"]


def test_bad_jobs_is_an_invalid_invocation(project):
    assert main(["--jobs", "0", str(project)]) == 1


def test_config_file_and_flags(project):
    (project.parent / "commentpurger.yml").write_text("include_yaml: true\nexclude: ['vendor']\n")
    vendor = project / "vendor"
    vendor.mkdir()
    (vendor / "lib.js").write_bytes(b"// keep\n")
    (project / "ci.yml").write_bytes(b"on: push # trigger\n")
    (project / "tool.py").write_bytes(b"x = 1  # c\n")
    (project / "app.min.js").write_bytes(b"/* keep */")

    assert main([str(project), "--include-python", "--exclude", "*.min.js"]) == 0

    assert (vendor / "lib.js").read_bytes() == b"// keep\n"
    assert (project / "app.min.js").read_bytes() == b"/* keep */"
    assert (project / "ci.yml").read_bytes() == b"on: push \n"
    assert (project / "tool.py").read_bytes() == b"x = 1  \n"


def test_iter_files_honours_exclude(project):
    (project / "node_modules").mkdir()
    (project / "node_modules" / "x.js").write_bytes(b"")
    names = sorted(p.name for p in iter_files(project, ["node_modules", "*.txt"]))
    assert names == ["test.css", "test.html", "test.js"]


def test_parallel_run(project):
    options = PurgeOptions(table=build_format_table(), jobs=3)
    stats = purge_paths([str(project)], options)
    assert stats.changed == 3
    assert (project / "test.js").read_bytes() == b"\nconsole.log('hello');"


def test_verbose_summary(project, capsys):
    assert main(["-v", str(project)]) == 0
    out = capsys.readouterr().out
    assert f"[skip] {project / 'ignored.txt'}" in out
    assert "Done: 3 changed, 0 unchanged, 1 skipped, 0 failed" in out


def test_unknown_flag_is_an_invalid_invocation(project, capsys):
    assert main(["--bogus", str(project)]) == 1
    assert "usage:" in capsys.readouterr().err
    assert (project / "test.js").read_bytes() == TEST_FILES["test.js"]


def test_help_exits_cleanly(capsys):
    assert main(["--help"]) == 0
    assert "usage:" in capsys.readouterr().out


def test_read_error_skips_file_only(project, monkeypatch, capsys):
    real_read_bytes = Path.read_bytes

    def read_bytes(self):
        if self.name == "test.css":
            raise PermissionError(13, "Permission denied", str(self))
        return real_read_bytes(self)

    monkeypatch.setattr(Path, "read_bytes", read_bytes)
    stats = purge_paths([str(project)])

    assert f"[ERROR] Failed to read {project / 'test.css'}" in capsys.readouterr().err
    assert stats.failed == 1
    assert stats.changed == 2
    assert real_read_bytes(project / "test.js") == b"\nconsole.log('hello');"
    assert real_read_bytes(project / "test.css") == TEST_FILES["test.css"]


def test_write_error_skips_file_only(project, monkeypatch, capsys):
    target = project / "test.css"

    def fake_open(path, mode="r", *args, **kwargs):
        if Path(path) == target and "w" in mode:
            raise PermissionError(13, "Permission denied", str(path))
        return open(path, mode, *args, **kwargs)

    monkeypatch.setattr(cli, "open", fake_open, raising=False)
    stats = purge_paths([str(project)])

    assert f"[ERROR] Failed to write {target}" in capsys.readouterr().err
    assert stats.failed == 1
    assert stats.changed == 2
    assert target.read_bytes() == TEST_FILES["test.css"]
    assert (project / "test.js").read_bytes() == b"\nconsole.log('hello');"


def test_unlistable_directory_is_reported_and_walk_continues(project, monkeypatch, capsys):
    locked = project / "locked"
    locked.mkdir()
    (locked / "hidden.js").write_bytes(b"// keep\n")
    real_scandir = os.scandir

    def scandir(path="."):
        if os.fspath(path) == str(locked):
            raise PermissionError(13, "Permission denied", os.fspath(path))
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", scandir)
    stats = purge_paths([str(project)])

    assert f"[ERROR] Error walking path {locked}: Permission denied" in capsys.readouterr().err
    assert stats.changed == 3
    assert (locked / "hidden.js").read_bytes() == b"// keep\n"
