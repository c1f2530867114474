"""
Pytest configuration and shared fixtures for cmdr tests.
"""

import os
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import Mock

import pytest

from cmdr.core.launcher import ProcessLauncher
from cmdr.core.runner import CommandRunner
from cmdr.core.session import SessionCounter

FAILURE_SCRIPT = """#!/bin/sh
ERR=${1:-23}
echo >&2 "all I got was a rock"
exit $ERR
"""

FOREVER_SCRIPT = """#!/bin/sh
while true
do
    sleep 1
done
"""


def _write_script(path: Path, body: str) -> Path:
    path.write_text(body)
    path.chmod(0o755)
    return path


@pytest.fixture
def runner():
    """A runner with its own session counter."""
    return CommandRunner(counter=SessionCounter())


@pytest.fixture
def go_dir(tmp_path, monkeypatch):
    """Switch into a directory holding a couple of Go sources."""
    for name in ("main.go", "util.go", "README.md"):
        (tmp_path / name).write_text("package main\n")
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def failure_script(tmp_path):
    """A script that writes to stderr and exits 23."""
    return _write_script(tmp_path / "failure", FAILURE_SCRIPT)


@pytest.fixture
def forever_script(tmp_path):
    """A script that never exits on its own."""
    return _write_script(tmp_path / "forever", FOREVER_SCRIPT)


@pytest.fixture
def mock_launcher():
    """A launcher whose OS primitives are all mocked."""
    launcher = Mock(spec=ProcessLauncher)
    launcher.lookup_path.side_effect = lambda path: f"/usr/bin/{os.path.basename(path)}"
    launcher.is_superuser.return_value = False
    launcher.spawn.return_value = Mock(pid=4321)
    launcher.read_streams.return_value = (b"out\n", b"err\n")
    launcher.wait.return_value = (0, SimpleNamespace(ru_utime=0.25, ru_stime=0.5))
    return launcher
