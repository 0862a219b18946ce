from __future__ import annotations

import posixpath
import shutil
from pathlib import Path
from typing import TYPE_CHECKING, Union

from .config import Config
from .errors import ConfigError, SignatureVerificationFailure, SubprocessFailure, ToolMissing
from .logger import setup_logger
from .runner import CommandRunner
from .sync import IndexSync

if TYPE_CHECKING:
    from .index import PackageIndex

_logger = setup_logger()

CLONE_BRANCH = "display"
PUBLISHED_TAG = "current-hackage"
SIGNING_KEY = "D6CF60FD"
SIGNING_DOCS_URL = "https://github.com/fpco/stackage-update#readme"


def repo_name_from_url(url: str) -> str:
    """
    Local clone directory name: base name of the URL without extension.
      https://github.com/commercialhaskell/all-cabal-hashes.git -> all-cabal-hashes
    """
    base = posixpath.basename(url.rstrip("/"))
    name = posixpath.splitext(base)[0]
    if not name or name in (".", ".."):
        raise ConfigError(f"Cannot derive a repository name from git URL {url!r}")
    return name


class GitIndexSync(IndexSync):
    """
    Index sync through a shallow git clone.

    Pipeline:
      1. Shallow clone (first time only) under <root_dir>/update
      2. Fetch tags (always)
      3. Optionally verify the signed published tag
      4. `git archive` the published tag straight to 00-index.tar
    """

    name = "git"

    def __init__(
        self,
        git_url: str,
        root_dir: Union[str, Path],
        runner: CommandRunner,
        gpg_verify: bool = False,
    ) -> None:
        self.git_url = git_url
        self.root_dir = Path(root_dir)
        self.runner = runner
        self.gpg_verify = gpg_verify

    @classmethod
    def from_config(cls, config: Config, runner: CommandRunner) -> "GitIndexSync":
        return cls(config.git_url, config.root_dir, runner, gpg_verify=config.gpg_verify)

    def sync(self, index: "PackageIndex") -> None:
        index.path.mkdir(parents=True, exist_ok=True)

        git_path = shutil.which("git")
        if git_path is None:
            raise ToolMissing("Please install git and provide the executable on your PATH")

        repo_name = repo_name_from_url(self.git_url)
        update_dir = self.root_dir / "update"
        clone_dir = update_dir / repo_name

        if not clone_dir.is_dir():
            update_dir.mkdir(parents=True, exist_ok=True)
            _logger.info("Cloning repository for first time from %s", self.git_url)
            self.runner.run(
                update_dir,
                git_path,
                ["clone", self.git_url, repo_name, "--depth", "1", "-b", CLONE_BRANCH],
            )

        self.runner.run(clone_dir, git_path, ["fetch", "--tags", "--depth=1"])

        tar_path = index.tar_path
        tar_path.unlink(missing_ok=True)

        if self.gpg_verify:
            self._verify_tag(clone_dir, git_path)

        _logger.debug("Exporting a tarball to %s", tar_path)
        self.runner.run(
            clone_dir,
            git_path,
            ["archive", "--format=tar", "-o", str(tar_path), PUBLISHED_TAG],
        )

    def _verify_tag(self, clone_dir: Path, git_path: str) -> None:
        try:
            self.runner.run(clone_dir, git_path, ["tag", "-v", PUBLISHED_TAG])
        except SubprocessFailure as e:
            raise SignatureVerificationFailure(
                e.command,
                e.returncode,
                e.stderr,
                message=(
                    "Signature verification failed. "
                    "Please ensure you've set up your GPG keychain to accept "
                    f"the {SIGNING_KEY} signing key.\n"
                    f"For more information, see: {SIGNING_DOCS_URL}"
                ),
            ) from e
