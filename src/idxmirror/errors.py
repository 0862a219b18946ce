"""
Exception hierarchy for idxmirror.

Everything raised on purpose by the sync and query paths derives from
PackageIndexError, so callers (and the CLI) can catch one type.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence, Union


class PackageIndexError(Exception):
    """Base class for all package index failures."""


class ConfigError(PackageIndexError):
    """A configuration value is missing or unusable."""


class ToolMissing(PackageIndexError):
    """The git executable could not be found on PATH."""


class SubprocessFailure(PackageIndexError):
    """An external command exited with a non-zero status."""

    def __init__(
        self,
        command: Sequence[str],
        returncode: Optional[int],
        stderr: str = "",
        message: Optional[str] = None,
    ) -> None:
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr or ""
        if message is None:
            message = f"Command {' '.join(self.command)!r} failed with exit code {returncode}"
            if self.stderr.strip():
                message += f": {self.stderr.strip()}"
        super().__init__(message)


class CommandTimeout(SubprocessFailure):
    """An external command did not finish within the configured timeout."""


class SignatureVerificationFailure(SubprocessFailure):
    """``git tag -v`` rejected the signature on the published tag."""


class NetworkFailure(PackageIndexError):
    """Transport-level failure while talking to the index server."""


class NetworkTimeout(NetworkFailure):
    """The index server did not answer within the configured timeouts."""


class IndexNotFound(PackageIndexError):
    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        super().__init__(f"Package index tarball not found: {self.path}")


class IndexCorrupt(PackageIndexError):
    """The index tarball (or a downloaded archive) could not be decoded."""

    def __init__(self, path: Union[str, Path], error: BaseException) -> None:
        self.path = Path(path)
        self.error = error
        super().__init__(f"Couldn't read index tarball {self.path}: {error}")


class InvalidIndexEntry(PackageIndexError):
    """A metadata entry for the queried package carries an unparsable version."""

    def __init__(self, path: Union[str, Path], entry: str, error: BaseException) -> None:
        self.path = Path(path)
        self.entry = entry
        self.error = error
        super().__init__(f"Invalid entry {entry!r} in {self.path}: {error}")


class InvalidVersion(PackageIndexError, ValueError):
    pass


class InvalidPackageName(PackageIndexError, ValueError):
    pass
