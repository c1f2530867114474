import asyncio
import signal
import textwrap
from unittest.mock import patch

import psutil
import pytest

from cmdr.core.base import Command, Param
from cmdr.core.exceptions import CommandTimeoutError
from cmdr.utils.deadline import kill, run_with_deadline, terminate


@pytest.mark.asyncio
async def test_run_with_deadline_success(runner):
    runtime = await run_with_deadline(
        runner, Command(path="echo", params="{{WHAT}}"), Param("WHAT", "hello"), timeout=10
    )
    assert runtime.rc == 0
    assert "hello" in runtime.stdout


@pytest.mark.asyncio
async def test_run_with_deadline_timeout(runner):
    with pytest.raises(CommandTimeoutError) as exc_info:
        await run_with_deadline(runner, Command(path="sleep", params="5"), timeout=0.2)
    result = exc_info.value.result
    assert result.rc == -signal.SIGTERM
    assert result.elapsed.total_seconds() < 5
    assert exc_info.value.details["pid"] == result.pid


def test_terminate_missing_process():
    with patch(
        "cmdr.utils.deadline.psutil.Process", side_effect=psutil.NoSuchProcess(999999)
    ):
        assert terminate(999999) is False


@pytest.mark.asyncio
async def test_run_with_deadline_kills_process_ignoring_sigterm(runner, tmp_path):
    script = tmp_path / "stubborn"
    script.write_text(
        textwrap.dedent(
            """\
            #!/bin/sh
            trap '' TERM
            while true
            do
                sleep 0.1
            done
            """
        )
    )
    script.chmod(0o755)
    with pytest.raises(CommandTimeoutError) as exc_info:
        await asyncio.wait_for(
            run_with_deadline(
                runner, Command(path=str(script)), timeout=0.2, kill_grace=0.2
            ),
            timeout=10,
        )
    result = exc_info.value.result
    assert result.rc == -signal.SIGKILL
    assert not psutil.pid_exists(result.pid)


def test_kill_missing_process():
    with patch(
        "cmdr.utils.deadline.psutil.Process", side_effect=psutil.NoSuchProcess(999999)
    ):
        assert kill(999999) is False
