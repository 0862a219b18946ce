import functools
import re
from dataclasses import dataclass
from typing import Tuple

from .errors import InvalidPackageName, InvalidVersion

# Dotted non-negative integers: 1, 0.1, 1.2.3.4 ...
VERSION_RE = re.compile(r"[0-9]+(?:\.[0-9]+)*")

# Alphanumeric words joined by single hyphens; every word needs a letter
# (so "foo-1" is not a name, otherwise "foo-1.0" would be ambiguous).
WORD_RE = re.compile(r"[A-Za-z0-9]*[A-Za-z][A-Za-z0-9]*")


def validate_package_name(name: str) -> str:
    """
    Return `name` unchanged if it is a valid package name.
    Raises InvalidPackageName otherwise.
    """
    if not isinstance(name, str) or not name:
        raise InvalidPackageName(f"Invalid package name: {name!r}")
    if "/" in name or not all(WORD_RE.fullmatch(w) for w in name.split("-")):
        raise InvalidPackageName(f"Invalid package name: {name!r}")
    return name


@functools.total_ordering
@dataclass(frozen=True)
class Version:
    """
    Package version as found in the index, e.g. 1.2.0.3.

    Usage:
      Version.parse("1.2.0.3")
      sorted(versions)[-1]   # latest
    """

    components: Tuple[int, ...]

    @staticmethod
    def parse(s: str) -> "Version":
        """
        Parse a dotted version string.
        Raises InvalidVersion if invalid.
        """
        if not isinstance(s, str):
            raise InvalidVersion("Version.parse expects a string")
        if not VERSION_RE.fullmatch(s):
            raise InvalidVersion(f"Invalid version string: {s!r}")
        return Version(tuple(int(part) for part in s.split(".")))

    def __str__(self) -> str:
        return ".".join(str(c) for c in self.components)

    def __lt__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.components < other.components
