"""Tests for CLI commands (no Xcode needed)."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from xcmake.cli import main

INVOCATION = "xcodebuild -scheme App build"

LOG = [
    "CompileC /b/a.o /s/a.c normal arm64 c com.apple.compilers.llvm.clang.1_0.compiler",
    "    cd /s",
    "    clang -c /s/a.c -o /b/a.o",
    "CompileC /b/bad.o /s/bad.c normal arm64 c com.apple.compilers.llvm.clang.1_0.compiler",
    "",
    "** BUILD SUCCEEDED **",
]


@pytest.fixture(autouse=True)
def _no_logging_setup():
    # setup_logging binds handlers to the runner's temporary streams
    with patch("xcmake.cli.setup_logging"):
        yield


# ── translate ──


class TestTranslate:
    def test_writes_output_file(self, write_log, tmp_path: Path):
        log = write_log(LOG)
        out = tmp_path / "Makefile"
        runner = CliRunner()
        result = runner.invoke(
            main, ["translate", str(log), "-o", str(out), "--invocation", INVOCATION]
        )
        assert result.exit_code == 0
        text = out.read_text()
        assert f"# Invocation: {INVOCATION}\n" in text
        assert "/b/a.o: /s/a.c\n" in text
        assert "1 rules, 0 link products" in result.output
        assert "line 4:" in result.output

    def test_stdout(self, write_log):
        log = write_log(LOG)
        runner = CliRunner()
        result = runner.invoke(main, ["translate", str(log)])
        assert result.exit_code == 0
        assert "# Generated by xcmake from build.log" in result.output
        assert "/b/a.o: /s/a.c" in result.output

    def test_missing_log(self, tmp_path: Path):
        runner = CliRunner()
        result = runner.invoke(main, ["translate", str(tmp_path / "nope.log")])
        assert result.exit_code == 1
        assert "Cannot read build log" in result.output

    def test_unwritable_output(self, write_log, tmp_path: Path):
        log = write_log(LOG)
        runner = CliRunner()
        result = runner.invoke(
            main, ["translate", str(log), "-o", str(tmp_path / "missing" / "Makefile")]
        )
        assert result.exit_code == 1
        assert "Cannot write rule set" in result.output


# ── check ──


class TestCheck:
    def test_fresh(self, write_log, tmp_path: Path):
        log = write_log(LOG)
        out = tmp_path / "Makefile"
        runner = CliRunner()
        runner.invoke(main, ["translate", str(log), "-o", str(out), "--invocation", INVOCATION])
        result = runner.invoke(main, ["check", str(out), str(log), "--invocation", INVOCATION])
        assert result.exit_code == 0
        assert "up to date" in result.output

    def test_stale_invocation(self, write_log, tmp_path: Path):
        log = write_log(LOG)
        out = tmp_path / "Makefile"
        runner = CliRunner()
        runner.invoke(main, ["translate", str(log), "-o", str(out), "--invocation", INVOCATION])
        result = runner.invoke(
            main, ["check", str(out), str(log), "--invocation", "xcodebuild -scheme Other build"]
        )
        assert result.exit_code == 1
        assert "stale" in result.output
