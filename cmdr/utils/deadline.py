"""
Caller-side deadlines for command execution.

The runner itself never cancels a child; run_with_deadline races the
delivered Runtime against a timer and signals the recorded pid on expiry.
"""

from __future__ import annotations

import asyncio

import psutil

from cmdr.core.base import Command, Runtime
from cmdr.core.exceptions import CommandTimeoutError
from cmdr.core.runner import CommandRunner

# Seconds a terminated child gets to exit before it is killed
KILL_GRACE = 5.0


def terminate(pid: int) -> bool:
    """Send SIGTERM to pid; return False if it had already gone."""
    try:
        psutil.Process(pid).terminate()
    except psutil.NoSuchProcess:
        return False
    return True


def kill(pid: int) -> bool:
    """Send SIGKILL to pid; return False if it had already gone."""
    try:
        psutil.Process(pid).kill()
    except psutil.NoSuchProcess:
        return False
    return True


async def run_with_deadline(
    runner: CommandRunner,
    command: Command,
    *params,
    timeout: float = 30.0,
    kill_grace: float = KILL_GRACE,
) -> Runtime:
    """
    Run a command, terminating it if it outlives the deadline:
    - Starts through run_async
    - Waits for the delivered Runtime for at most ``timeout`` seconds
    - On expiry sends SIGTERM to the recorded pid, then SIGKILL if it is
      still running after ``kill_grace`` seconds
    - Raises once the Runtime of the stopped process has been delivered
    """
    results: asyncio.Queue[Runtime] = asyncio.Queue(maxsize=1)
    runtime = await runner.run_async(command, results, *params)
    try:
        return await asyncio.wait_for(results.get(), timeout=timeout)
    except asyncio.TimeoutError as e:
        terminate(runtime.pid)
        try:
            final = await asyncio.wait_for(results.get(), timeout=kill_grace)
        except asyncio.TimeoutError:
            kill(runtime.pid)
            final = await results.get()
        error = CommandTimeoutError(
            f"process {final.pid} timeout after {timeout}s",
            details={"sid": final.sid, "pid": final.pid, "timeout": timeout},
        )
        error.result = final
        raise error from e
