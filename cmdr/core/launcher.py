"""
Operating system primitives used by the runner.

ProcessLauncher wraps path lookup, credential checks, process creation and
waiting so the runner can be exercised with a mock launcher instead of real
superuser privileges.
"""

import os
import pwd
import resource
import shutil
import signal
import subprocess
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Tuple

from cmdr.core.exceptions import (
    NoSuchFileError,
    SpawnError,
    StreamError,
    UserLookupError,
)


class ProcessLauncher:
    """Process creation with an optional identity override."""

    def __init__(self) -> None:
        # Detached children are kept so they can be reaped once they exit.
        self.detached: Dict[int, subprocess.Popen] = {}

    def lookup_path(self, path: str) -> str:
        """Resolve an executable against PATH.

        A path with a directory component is checked directly and returned as
        an absolute path.

        Raises:
            NoSuchFileError: If no executable file is found
        """
        found = shutil.which(path)
        if found is None:
            raise NoSuchFileError(
                f"exec: {path!r}: no such file or directory",
                details={"path": path},
            )
        if os.sep in found:
            found = os.path.abspath(found)
        return found

    def is_superuser(self) -> bool:
        return os.geteuid() == 0

    def lookup_uid(self, user: str) -> int:
        """Resolve a user name to its numeric user id."""
        try:
            return pwd.getpwnam(user).pw_uid
        except KeyError as e:
            raise UserLookupError(
                f"user: unknown user {user}", details={"user": user}
            ) from e

    def spawn(
        self,
        argv: List[str],
        cwd: Optional[str] = None,
        uid: Optional[int] = None,
    ) -> subprocess.Popen:
        """Start argv with stdout and stderr redirected to fresh pipes.

        Standard input is connected to /dev/null.
        """
        try:
            return subprocess.Popen(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                cwd=cwd,
                user=uid,
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise SpawnError(
                f"{argv[0]}: {e}", details={"argv": argv, "cwd": cwd}
            ) from e

    def read_streams(self, proc: subprocess.Popen) -> Tuple[bytes, bytes]:
        """Read stdout and stderr to EOF, concurrently so neither pipe fills."""
        try:
            with ThreadPoolExecutor(max_workers=2) as pool:
                out = pool.submit(proc.stdout.read)
                err = pool.submit(proc.stderr.read)
                return out.result(), err.result()
        except OSError as e:
            raise StreamError(f"reading output of pid {proc.pid}: {e}") from e
        finally:
            proc.stdout.close()
            proc.stderr.close()

    def wait(self, proc: subprocess.Popen) -> Tuple[int, resource.struct_rusage]:
        """Block until proc exits; return its exit code and resource usage.

        A child killed by a signal reports the negative signal number.
        """
        try:
            _, status, usage = os.wait4(proc.pid, 0)
        except OSError as e:
            raise StreamError(f"waiting for pid {proc.pid}: {e}") from e
        proc.returncode = os.waitstatus_to_exitcode(status)
        return proc.returncode, usage

    def kill(self, proc: subprocess.Popen) -> None:
        """Send SIGKILL to proc and reap it."""
        try:
            os.kill(proc.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass
        self.wait(proc)

    def start_detached(self, argv: List[str], cwd: Optional[str] = None) -> int:
        """Start argv in its own session without pipes and return its pid."""
        self._reap()
        try:
            proc = subprocess.Popen(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                cwd=cwd,
                start_new_session=True,
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise SpawnError(
                f"{argv[0]}: {e}", details={"argv": argv, "cwd": cwd}
            ) from e
        self.detached[proc.pid] = proc
        return proc.pid

    def _reap(self) -> None:
        for pid, proc in list(self.detached.items()):
            if proc.poll() is not None:
                del self.detached[pid]
