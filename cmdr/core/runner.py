"""
Process runner for command templates.

CommandRunner turns a Command plus parameters into a child process with
captured stdout and stderr and records the outcome in a Runtime. Invocations
run synchronously (``run``), asynchronously with delivery through an
``asyncio.Queue`` (``run_async``), or fully detached (``background``).
"""

import asyncio
import subprocess
from datetime import datetime, timedelta
from typing import Optional, Sequence, Set, Tuple

from cmdr.core.base import Command, Runtime
from cmdr.core.exceptions import CmdrError, MustBeRootError, StreamError
from cmdr.core.launcher import ProcessLauncher
from cmdr.core.observability import get_logger, truncate_command
from cmdr.core.session import SessionCounter

logger = get_logger(__name__)


class CommandRunner:
    """Executes commands and assembles their Runtime records."""

    def __init__(
        self,
        launcher: Optional[ProcessLauncher] = None,
        counter: Optional[SessionCounter] = None,
        encoding: str = "utf-8",
        errors: str = "replace",
    ) -> None:
        """
        Initialize the runner.

        Args:
            launcher: OS capability used to look up, spawn and wait on processes
            counter: Session identifier source, one per runner by default
            encoding: Encoding used to decode captured output
            errors: Decoding error handler
        """
        self.launcher = launcher or ProcessLauncher()
        self.counter = counter or SessionCounter()
        self.encoding = encoding
        self.errors = errors
        self._tasks: Set[asyncio.Task] = set()

    def _start(
        self, command: Command, runtime: Runtime, params: Sequence[Tuple[str, str]]
    ) -> subprocess.Popen:
        logger.debug(
            "Invocation started",
            metadata={"path": command.path, "params": len(params)},
        )
        path = self.launcher.lookup_path(command.path)
        text = command.render(*params).strip()
        runtime.cmd = f"{path} {text}" if text else path

        uid = None
        if command.user:
            if not self.launcher.is_superuser():
                raise MustBeRootError(
                    f"must be run as root to run as {command.user}",
                    details={"user": command.user},
                )
            uid = self.launcher.lookup_uid(command.user)

        runtime.sid = self.counter.next()
        runtime.started = datetime.now()
        proc = self.launcher.spawn(runtime.cmd.split(), cwd=command.dir or None, uid=uid)
        runtime.pid = proc.pid
        logger.info(
            "Process started",
            metadata={
                "sid": runtime.sid,
                "pid": runtime.pid,
                "command": truncate_command(runtime.cmd),
                "dir": command.dir,
                "user": command.user,
            },
        )
        return proc

    def _finish(self, proc: subprocess.Popen, runtime: Runtime) -> None:
        try:
            stdout, stderr = self.launcher.read_streams(proc)
        except StreamError:
            try:
                self.launcher.kill(proc)
            except StreamError as e:
                logger.error("Could not reap process", error=e, metadata={"pid": proc.pid})
            raise
        rc, usage = self.launcher.wait(proc)
        runtime.finished = datetime.now()
        runtime.pid = proc.pid
        runtime.rc = rc
        runtime.user_time = timedelta(seconds=usage.ru_utime)
        runtime.system_time = timedelta(seconds=usage.ru_stime)
        try:
            runtime.stdout = stdout.decode(self.encoding, errors=self.errors)
            runtime.stderr = stderr.decode(self.encoding, errors=self.errors)
        except UnicodeDecodeError as e:
            raise StreamError(
                f"decoding output of pid {proc.pid}: {e}",
                details={"encoding": self.encoding},
            ) from e
        logger.info(
            "Process finished",
            metadata={"sid": runtime.sid, "pid": runtime.pid, "rc": rc},
            duration_ms=runtime.elapsed.total_seconds() * 1000,
        )

    def _failed(self, command: Command, runtime: Runtime, error: CmdrError) -> None:
        error.result = runtime
        logger.error(
            "Command failed",
            error=error,
            metadata={"sid": runtime.sid, "path": command.path},
        )

    def run(self, command: Command, *params: Tuple[str, str]) -> Runtime:
        """Run a command to completion.

        A nonzero exit code is reported in ``Runtime.rc`` and is not an error.

        Raises:
            CmdrError: On any failure; ``error.result`` holds the partial Runtime
        """
        runtime = Runtime()
        try:
            proc = self._start(command, runtime, params)
            self._finish(proc, runtime)
        except CmdrError as e:
            self._failed(command, runtime, e)
            raise
        return runtime

    async def run_async(
        self,
        command: Command,
        results: "asyncio.Queue[Runtime]",
        *params: Tuple[str, str],
    ) -> Runtime:
        """Start a command and deliver its Runtime on ``results`` when done.

        Returns the in-flight Runtime (sid, pid, cmd and started are set).
        Exactly one Runtime is put on ``results`` per call, including when
        start-up fails, in which case the error is raised after delivery.
        """
        runtime = Runtime()
        try:
            proc = self._start(command, runtime, params)
        except CmdrError as e:
            self._failed(command, runtime, e)
            await results.put(runtime)
            raise

        task = asyncio.create_task(self._deliver(command, proc, runtime, results))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return runtime

    async def _deliver(
        self,
        command: Command,
        proc: subprocess.Popen,
        runtime: Runtime,
        results: "asyncio.Queue[Runtime]",
    ) -> None:
        try:
            await asyncio.to_thread(self._finish, proc, runtime)
        except CmdrError as e:
            self._failed(command, runtime, e)
        finally:
            await results.put(runtime)

    async def execute(
        self,
        command: Command,
        *params: Tuple[str, str],
        results: "Optional[asyncio.Queue[Runtime]]" = None,
    ) -> Runtime:
        """Run a command in the mode its ``asynchronous`` flag selects.

        Synchronous commands run in a worker thread and return the completed
        Runtime; asynchronous ones return the in-flight Runtime and deliver
        the completed one on ``results``.
        """
        if command.asynchronous:
            if results is None:
                raise ValueError("asynchronous commands need a results queue")
            return await self.run_async(command, results, *params)
        return await asyncio.to_thread(self.run, command, *params)

    def background(self, command: Command) -> int:
        """Start the command's executable detached and return its pid.

        The argument template is not rendered and nothing is captured or
        waited on.
        """
        path = self.launcher.lookup_path(command.path)
        pid = self.launcher.start_detached([path], cwd=command.dir or None)
        logger.info("Background process started", metadata={"pid": pid, "path": path})
        return pid
