import stat
from pathlib import Path

import pytest


@pytest.fixture
def make_converter(tmp_path):
    """Write an executable shell script standing in for pandoc.

    The script is called as ``<script> <input> -o <output>``.
    """

    def _make(body: str, name: str = "fake-pandoc") -> Path:
        script = tmp_path / name
        script.write_text(f"#!/bin/sh\n{body}\n", encoding="utf-8")
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    return _make
