from __future__ import annotations

import tarfile
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO, FrozenSet, Iterator, Optional, Set, Tuple, Union

from .errors import IndexCorrupt, IndexNotFound, InvalidIndexEntry, InvalidVersion
from .logger import setup_logger
from .version import Version, validate_package_name

if TYPE_CHECKING:
    from .index import PackageIndex

_logger = setup_logger()

METADATA_SUFFIX = ".json"


def parse_entry_path(path: str, suffix: str = METADATA_SUFFIX) -> Optional[Tuple[str, str]]:
    """
    Split an archive entry path of the form name/version/name<suffix>.
    Returns (name, version string) or None for anything else.
    """
    parts = path.split("/")
    if len(parts) != 3:
        return None
    name, version, filename = parts
    if filename != name + suffix:
        return None
    return name, version


def _check_end_of_archive(fh: BinaryIO, offset: int) -> None:
    """
    tarfile stops quietly at a bad header past the first member, so make
    sure it actually stopped at the end-of-archive marker (two NUL blocks,
    or nothing at all for an archive cut at a member boundary).
    """
    fh.seek(offset)
    trailer = fh.read(2 * tarfile.BLOCKSIZE)
    if trailer.strip(b"\0"):
        raise tarfile.ReadError(f"invalid header at offset {offset}")


def iter_index_entries(tar_path: Union[str, Path]) -> Iterator[tarfile.TarInfo]:
    """
    Yield every entry of the index tarball in archive order.

    Stream mode: a single forward pass over the entries. A generator is
    exhausted after one iteration; open a new one to rescan. Corruption
    anywhere in the archive raises IndexCorrupt, never a shortened listing.
    """
    tar_path = Path(tar_path)
    try:
        fh = open(tar_path, "rb")
    except FileNotFoundError as e:
        raise IndexNotFound(tar_path) from e

    with fh:
        try:
            with tarfile.open(fileobj=fh, mode="r|") as tar:
                for entry in tar:
                    yield entry
                _check_end_of_archive(fh, tar.offset)
        except tarfile.TarError as e:
            raise IndexCorrupt(tar_path, e) from e


def get_pkg_versions(
    index: "PackageIndex",
    package_name: str,
    suffix: str = METADATA_SUFFIX,
) -> Optional[FrozenSet[Version]]:
    """
    Fetch all the versions of `package_name` listed in the index.

    Returns None when the package does not appear at all. Raises
    IndexCorrupt when the tarball cannot be decoded and InvalidIndexEntry
    when one of the package's entries carries an unparsable version.
    """
    name = validate_package_name(package_name)
    tar_path = index.tar_path
    _logger.debug("Iterating through tarball %s", tar_path)

    versions: Set[Version] = set()
    for entry in iter_index_entries(tar_path):
        parsed = parse_entry_path(entry.name, suffix)
        if parsed is None or parsed[0] != name:
            continue
        try:
            versions.add(Version.parse(parsed[1]))
        except InvalidVersion as e:
            raise InvalidIndexEntry(tar_path, entry.name, e) from e

    if not versions:
        return None
    return frozenset(versions)
