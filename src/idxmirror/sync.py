from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .index import PackageIndex


class IndexSync:
    """
    A way of refreshing the index tarball of a PackageIndex.

    Implementations: GitIndexSync (git clone + archive export) and
    HttpIndexSync (conditional download). Which one runs is decided by
    index.update_index, never by the strategies themselves.
    """

    name = "abstract"

    def sync(self, index: "PackageIndex") -> None:
        """Bring `index.tar_path` up to date, or raise a PackageIndexError."""
        raise NotImplementedError
