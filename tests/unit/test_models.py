"""
Tests for Command, Param, Runtime and the error hierarchy.
"""

from datetime import datetime, timedelta

import pytest
from pydantic import ValidationError

from cmdr.core.base import Command, Param, Runtime
from cmdr.core.exceptions import CmdrError, NoSuchFileError


class TestCommand:
    def test_render(self):
        command = Command(path="/bin/ls", params="-l {{WHAT}}")
        assert command.render(Param("WHAT", "-a")) == "-l -a"

    def test_is_immutable(self):
        command = Command(path="/bin/ls")
        with pytest.raises(ValidationError):
            command.path = "/bin/cat"

    def test_async_alias(self):
        assert Command.model_validate({"path": "ls", "async": True}).asynchronous
        assert Command(path="ls", asynchronous=True).asynchronous

    def test_defaults(self):
        command = Command(path="ls")
        assert command.params == ""
        assert command.dir is None
        assert command.user is None
        assert command.asynchronous is False


class TestRuntime:
    def test_elapsed(self):
        started = datetime(2024, 1, 1, 12, 0, 0)
        runtime = Runtime(started=started, finished=started + timedelta(seconds=2))
        assert runtime.elapsed == timedelta(seconds=2)

    def test_elapsed_unset(self):
        assert Runtime().elapsed == timedelta(0)

    def test_dump_format(self):
        runtime = Runtime(sid=7, pid=99, rc=1, cmd="/bin/false", stderr="boom")
        lines = str(runtime).splitlines()
        assert lines[0] == ""
        assert lines[1] == "CMD: /bin/false"
        assert lines[2] == "SID: 7"
        assert lines[3] == "PID: 99"
        assert lines[4] == "RC : 1"
        assert lines[6] == "ERR: boom"
        assert [line[:4] for line in lines[7:]] == ["SYS:", "USR:", "CLK:"]

    def test_to_dict(self):
        runtime = Runtime(sid=1, user_time=timedelta(milliseconds=500))
        data = runtime.to_dict()
        assert data["sid"] == 1
        assert data["user_time"] == 0.5
        assert data["started"] is None


class TestErrors:
    def test_to_dict(self):
        error = NoSuchFileError("missing", details={"path": "/x"})
        assert error.to_dict() == {
            "error": "NoSuchFileError",
            "message": "missing",
            "error_code": "NO_SUCH_FILE",
            "details": {"path": "/x"},
        }

    def test_base_without_code(self):
        error = CmdrError("plain")
        assert str(error) == "plain"
        assert error.result is None
