"""
Package index handle and transport selection.

A PackageIndex only wraps a directory; it never caches the tarball or its
contents. get_pkg_index answers "is there a mirror here?", load_pkg_index
creates one on demand and update_index refreshes it through git when git
is installed, plain HTTP otherwise.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .config import Config
from .downloader import Downloader
from .git_sync import GitIndexSync
from .http_sync import HttpIndexSync
from .logger import setup_logger
from .runner import CommandRunner
from .sync import IndexSync

_logger = setup_logger()

TAR_NAME = "00-index.tar"
TAR_GZ_NAME = "00-index.tar.gz"
TMP_TAR_GZ_NAME = "00-index.tar.gz.tmp"
ETAG_NAME = "00-index.tar.gz.etag"


@dataclass(frozen=True)
class PackageIndex:
    """Wrapper to an existing package index directory."""

    path: Path

    @property
    def tar_path(self) -> Path:
        return self.path / TAR_NAME

    @property
    def tar_gz_path(self) -> Path:
        return self.path / TAR_GZ_NAME

    @property
    def tmp_tar_gz_path(self) -> Path:
        return self.path / TMP_TAR_GZ_NAME

    @property
    def etag_path(self) -> Path:
        return self.path / ETAG_NAME


def get_pkg_index(directory: Union[str, Path]) -> Optional[PackageIndex]:
    """Return a handle if `directory` exists right now, else None."""
    path = Path(directory).expanduser().absolute()
    if path.is_dir():
        return PackageIndex(path)
    return None


def load_pkg_index(
    directory: Union[str, Path],
    config: Config,
    runner: Optional[CommandRunner] = None,
    downloader: Optional[Downloader] = None,
) -> PackageIndex:
    """
    Load the package index; if it does not exist, download it first.

    The returned handle only guarantees the directory exists. A handle
    does not imply a readable tarball.
    """
    idx = get_pkg_index(directory)
    if idx is not None:
        return idx

    idx = PackageIndex(Path(directory).expanduser().absolute())
    _logger.info("No package index found at %s, fetching it...", idx.path)
    update_index(idx, config, runner=runner, downloader=downloader)
    return idx


def is_git_installed() -> bool:
    return shutil.which("git") is not None


def select_sync(
    config: Config,
    runner: Optional[CommandRunner] = None,
    downloader: Optional[Downloader] = None,
) -> IndexSync:
    if is_git_installed():
        return GitIndexSync.from_config(config, runner or CommandRunner(timeout=config.git_timeout))
    return HttpIndexSync.from_config(config, downloader or Downloader(config))


def update_index(
    index: PackageIndex,
    config: Config,
    runner: Optional[CommandRunner] = None,
    downloader: Optional[Downloader] = None,
) -> None:
    """Update the index tarball with whichever transport is available."""
    strategy = select_sync(config, runner=runner, downloader=downloader)
    _logger.debug("Updating package index at %s via %s", index.path, strategy.name)
    try:
        strategy.sync(index)
    finally:
        # Only close a downloader we created ourselves
        if isinstance(strategy, HttpIndexSync) and downloader is None:
            strategy.downloader.close()
