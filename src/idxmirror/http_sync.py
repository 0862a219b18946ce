from __future__ import annotations

import gzip
import shutil
import zlib
from typing import TYPE_CHECKING, Dict

import requests
from tqdm import tqdm

from .config import Config
from .downloader import Downloader
from .errors import IndexCorrupt, NetworkFailure, NetworkTimeout
from .logger import setup_logger
from .sync import IndexSync

if TYPE_CHECKING:
    from .index import PackageIndex

_logger = setup_logger()

ETAG_MAX_BYTES = 512
CHUNK_SIZE = 65536


class HttpIndexSync(IndexSync):
    """
    Index sync through a conditional HTTP download of 00-index.tar.gz.

    Pipeline (only on 200 OK):
      1. Store the response ETag
      2. Stream body -> 00-index.tar.gz.tmp
      3. Gunzip .tmp -> 00-index.tar
      4. Rename .tmp -> 00-index.tar.gz
    Any other status (304 Not Modified included) leaves the mirror alone.

    The ETag and the tarball are written in place, so a crash between
    steps can leave them out of step with the .tar.gz on disk.
    """

    name = "http"

    def __init__(
        self,
        url: str,
        downloader: Downloader,
        gpg_verify: bool = False,
        show_progress: bool = True,
    ) -> None:
        self.url = url
        self.downloader = downloader
        self.gpg_verify = gpg_verify
        self.show_progress = show_progress

    @classmethod
    def from_config(cls, config: Config, downloader: Downloader) -> "HttpIndexSync":
        return cls(config.http_url, downloader, gpg_verify=config.gpg_verify)

    def sync(self, index: "PackageIndex") -> None:
        index.path.mkdir(parents=True, exist_ok=True)

        if self.gpg_verify:
            _logger.warning(
                "You have enabled GPG verification of the package index, "
                "but GPG verification only works with Git downloading"
            )

        _logger.debug("Downloading package index from %s", self.url)

        headers: Dict[str, bytes] = {}
        if index.etag_path.is_file():
            with open(index.etag_path, "rb") as fh:
                headers["If-None-Match"] = fh.read(ETAG_MAX_BYTES)

        try:
            with self.downloader.open(self.url, headers=headers) as resp:
                if resp.status_code != 200:
                    _logger.debug("Server answered %d, keeping existing index", resp.status_code)
                    return
                self._store_response(index, resp)
        except requests.exceptions.Timeout as e:
            raise NetworkTimeout(f"Timed out downloading {self.url}: {e}") from e
        except requests.exceptions.RequestException as e:
            raise NetworkFailure(f"Failed to download {self.url}: {e}") from e

        _logger.info("Package index updated at %s", index.tar_path)

    def _store_response(self, index: "PackageIndex", resp: requests.Response) -> None:
        etag = resp.headers.get("ETag")
        if etag is not None:
            # requests decodes header values as latin-1; this restores the raw bytes
            index.etag_path.write_bytes(etag.encode("latin-1"))

        total = int(resp.headers.get("content-length", 0) or 0)
        with open(index.tmp_tar_gz_path, "wb") as fh:
            with tqdm(
                total=total,
                unit="B",
                unit_scale=True,
                desc=index.tar_gz_path.name,
                disable=not self.show_progress,
            ) as bar:
                for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        fh.write(chunk)
                        bar.update(len(chunk))

        self._gunzip(index)
        index.tmp_tar_gz_path.replace(index.tar_gz_path)

    @staticmethod
    def _gunzip(index: "PackageIndex") -> None:
        try:
            with gzip.open(index.tmp_tar_gz_path, "rb") as f_in, open(index.tar_path, "wb") as f_out:
                shutil.copyfileobj(f_in, f_out)
        except (gzip.BadGzipFile, EOFError, zlib.error) as e:
            raise IndexCorrupt(index.tmp_tar_gz_path, e) from e
