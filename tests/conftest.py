"""Shared pytest fixtures for xcmake tests."""

from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture
def write_log(tmp_path: Path):
    """Write a build log from a list of lines and return its path."""

    def _write(lines: list[str], name: str = "build.log") -> Path:
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n")
        return path

    return _write


@pytest.fixture
def write_filelist(tmp_path: Path):
    def _write(objects: list[str], name: str = "App.LinkFileList") -> Path:
        path = tmp_path / name
        path.write_text("".join(f"{o}\n" for o in objects))
        return path

    return _write
