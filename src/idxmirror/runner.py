from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Optional, Sequence, Union

from .errors import CommandTimeout, SubprocessFailure
from .logger import setup_logger

_logger = setup_logger()


class CommandRunner:
    """
    Runs external commands in a working directory.

    Sync strategies only talk to this interface, so tests can swap in a
    fake that records invocations instead of touching a real git.
    """

    def __init__(self, timeout: Optional[float] = None) -> None:
        self.timeout = timeout

    def run(self, cwd: Union[str, Path], executable: Union[str, Path], args: Sequence[str]) -> str:
        """
        Run `executable args...` inside `cwd` and return its stdout.
        Raises SubprocessFailure on a non-zero exit, CommandTimeout on timeout.
        """
        cmd = [str(executable), *args]
        _logger.debug("Running %s (in %s)", " ".join(cmd), cwd)
        try:
            result = subprocess.run(
                cmd,
                cwd=str(cwd),
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise CommandTimeout(
                cmd, None, message=f"Command {' '.join(cmd)!r} timed out after {e.timeout}s"
            ) from e

        if result.returncode != 0:
            _logger.debug("Command failed (%d): %s", result.returncode, result.stderr.strip())
            raise SubprocessFailure(cmd, result.returncode, result.stderr)
        return result.stdout
