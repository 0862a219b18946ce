from __future__ import annotations

from typing import Optional

from .config import Config
from .downloader import Downloader
from .errors import PackageIndexError
from .index import PackageIndex, load_pkg_index, update_index
from .logger import Colors, setup_logger
from .runner import CommandRunner
from .scanner import get_pkg_versions

_logger = setup_logger()

# module-level singletons (initialized by init(cfg))
_cfg: Optional[Config] = None
runner: Optional[CommandRunner] = None
downloader: Optional[Downloader] = None


# -------------------------
# Initialization
# -------------------------
def init(config: Config) -> None:
    """Initialize singleton instances from config."""
    global _cfg, runner, downloader
    _cfg = config
    runner = CommandRunner(timeout=_cfg.git_timeout)
    downloader = Downloader(_cfg)
    _logger.debug("operations initialized with index_dir=%s", _cfg.index_dir)


def _ensure_initialized() -> None:
    if not all((_cfg, runner, downloader)):
        raise RuntimeError("operations not initialized; call operations.init(config) first")


def _format_size(n: int) -> str:
    size = float(n)
    for unit in ("B", "KiB", "MiB"):
        if size < 1024:
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GiB"


# -------------------------
# Commands
# -------------------------
def update() -> None:
    """Refresh the package index, creating it if needed."""
    _ensure_initialized()
    idx = PackageIndex(_cfg.index_dir.expanduser().absolute())
    print(f"Updating package index in {idx.path}...")
    try:
        update_index(idx, _cfg, runner=runner, downloader=downloader)
    except PackageIndexError as e:
        print(f"[{Colors.FG_RED}FAIL{Colors.RESET}] {e}")
        raise
    print(f"[{Colors.FG_GREEN}OK{Colors.RESET}] {idx.tar_path}")


def versions(package: str, latest: bool = False) -> None:
    _ensure_initialized()
    idx = load_pkg_index(_cfg.index_dir, _cfg, runner=runner, downloader=downloader)
    found = get_pkg_versions(idx, package)
    if not found:
        print(f"No versions found for '{package}'.")
        return

    ordered = sorted(found)
    if latest:
        print(f"{package}-{ordered[-1]}")
        return
    for v in ordered:
        print(f"{package}-{v}")


def status() -> None:
    """Show which index files are present."""
    _ensure_initialized()
    idx = PackageIndex(_cfg.index_dir.expanduser().absolute())
    print(f"Index directory: {idx.path}")
    for p in (idx.tar_path, idx.tar_gz_path, idx.tmp_tar_gz_path, idx.etag_path):
        if p.is_file():
            print(f"  {p.name:<24} {_format_size(p.stat().st_size)}")
        else:
            print(f"  {p.name:<24} -")
    if idx.etag_path.is_file():
        print(f"ETag: {idx.etag_path.read_bytes().decode('latin-1')}")
