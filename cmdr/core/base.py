"""
Core data models for cmdr.

A Command is the reusable template describing how to invoke a program, a
Param is one caller-supplied value and a Runtime records everything observed
while a single invocation ran.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field

from cmdr.core import template


class Param(NamedTuple):
    """A named value for a ``{{NAME}}`` placeholder.

    An empty name appends the value as a bare trailing argument.
    """

    name: str
    value: str


class Command(BaseModel):
    """Immutable description of a local program invocation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    path: str = Field(..., description="Executable name or path")
    params: str = Field("", description="Argument template")
    dir: Optional[str] = Field(None, description="Working directory for the child")
    user: Optional[str] = Field(None, description="User name to run the child as")
    asynchronous: bool = Field(
        False, alias="async", description="Deliver results through a queue"
    )

    def render(self, *params) -> str:
        """Render the argument template with the given parameters."""
        return template.render(self.params, params)


RUNTIME_FORMAT = """
CMD: {cmd}
SID: {sid}
PID: {pid}
RC : {rc}
OUT: {stdout}
ERR: {stderr}
SYS: {system_time}
USR: {user_time}
CLK: {elapsed}
"""


class Runtime(BaseModel):
    """Result of one command invocation.

    Populated field by field while the invocation progresses; complete once it
    has been returned or delivered to the caller.
    """

    sid: int = Field(0, description="Session identifier")
    pid: int = Field(0, description="Operating system process id")
    rc: int = Field(0, description="Exit code")
    cmd: str = Field("", description="Command line actually executed")
    stdout: str = Field("", description="Captured standard output")
    stderr: str = Field("", description="Captured standard error")
    system_time: timedelta = Field(timedelta(0), description="System CPU time")
    user_time: timedelta = Field(timedelta(0), description="User CPU time")
    started: Optional[datetime] = Field(None, description="Start timestamp")
    finished: Optional[datetime] = Field(None, description="Finish timestamp")

    @property
    def elapsed(self) -> timedelta:
        """Wall-clock duration of the invocation."""
        if self.started is None or self.finished is None:
            return timedelta(0)
        return self.finished - self.started

    def __str__(self) -> str:
        return RUNTIME_FORMAT.format(
            cmd=self.cmd,
            sid=self.sid,
            pid=self.pid,
            rc=self.rc,
            stdout=self.stdout,
            stderr=self.stderr,
            system_time=self.system_time,
            user_time=self.user_time,
            elapsed=self.elapsed,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert the runtime to a JSON-friendly dictionary."""
        return {
            "sid": self.sid,
            "pid": self.pid,
            "rc": self.rc,
            "cmd": self.cmd,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "system_time": self.system_time.total_seconds(),
            "user_time": self.user_time.total_seconds(),
            "started": self.started.isoformat() if self.started else None,
            "finished": self.finished.isoformat() if self.finished else None,
            "elapsed": self.elapsed.total_seconds(),
        }
