import pytest

from idxmirror.errors import ConfigError, SignatureVerificationFailure, SubprocessFailure, ToolMissing
from idxmirror.git_sync import GitIndexSync, repo_name_from_url
from idxmirror.index import PackageIndex

from conftest import FakeRunner

GIT_URL = "https://github.com/commercialhaskell/all-cabal-hashes.git"


@pytest.fixture
def root(tmp_path):
    return tmp_path / "root"


@pytest.fixture
def idx(tmp_path):
    return PackageIndex(tmp_path / "indices" / "hackage")


@pytest.mark.parametrize(
    "url, expected",
    [
        (GIT_URL, "all-cabal-hashes"),
        ("https://example.com/mirrors/index", "index"),
        ("https://example.com/mirrors/index.git/", "index"),
        ("git@github.com:org/hackage-index.git", "hackage-index"),
    ],
)
def test_repo_name_from_url(url, expected):
    assert repo_name_from_url(url) == expected


def test_repo_name_from_empty_url():
    with pytest.raises(ConfigError):
        repo_name_from_url("")


def test_first_sync_clones_fetches_and_exports(idx, root, git_on_path):
    runner = FakeRunner()
    GitIndexSync(GIT_URL, root, runner).sync(idx)

    update_dir = root / "update"
    clone_dir = update_dir / "all-cabal-hashes"
    assert idx.path.is_dir()
    assert runner.calls == [
        (update_dir, "/usr/bin/git", ["clone", GIT_URL, "all-cabal-hashes", "--depth", "1", "-b", "display"]),
        (clone_dir, "/usr/bin/git", ["fetch", "--tags", "--depth=1"]),
        (clone_dir, "/usr/bin/git", ["archive", "--format=tar", "-o", str(idx.tar_path), "current-hackage"]),
    ]


def test_existing_clone_is_reused(idx, root, git_on_path, caplog):
    (root / "update" / "all-cabal-hashes").mkdir(parents=True)
    runner = FakeRunner()

    GitIndexSync(GIT_URL, root, runner).sync(idx)

    assert runner.subcommands == ["fetch", "archive"]
    assert "Cloning repository" not in caplog.text


def test_stale_tarball_is_removed_before_export(idx, root, git_on_path):
    idx.path.mkdir(parents=True)
    idx.tar_path.write_bytes(b"stale")

    GitIndexSync(GIT_URL, root, FakeRunner()).sync(idx)

    # FakeRunner does not write the archive, so the old one must be gone
    assert not idx.tar_path.exists()


def test_verification_runs_before_export(idx, root, git_on_path):
    runner = FakeRunner()
    GitIndexSync(GIT_URL, root, runner, gpg_verify=True).sync(idx)
    assert runner.subcommands == ["clone", "fetch", "tag", "archive"]
    assert runner.calls[2][2] == ["tag", "-v", "current-hackage"]


def test_verification_failure_aborts_export(idx, root, git_on_path):
    idx.path.mkdir(parents=True)
    idx.tar_path.write_bytes(b"stale")
    runner = FakeRunner(fail_on={"tag"})

    with pytest.raises(SignatureVerificationFailure) as excinfo:
        GitIndexSync(GIT_URL, root, runner, gpg_verify=True).sync(idx)

    message = str(excinfo.value)
    assert "D6CF60FD" in message
    assert "https://github.com/fpco/stackage-update#readme" in message
    assert excinfo.value.returncode == 128
    assert "archive" not in runner.subcommands
    assert not idx.tar_path.exists()


def test_fetch_failure_propagates_and_keeps_clone(idx, root, git_on_path):
    runner = FakeRunner(fail_on={"fetch"})

    with pytest.raises(SubprocessFailure) as excinfo:
        GitIndexSync(GIT_URL, root, runner).sync(idx)

    assert excinfo.value.command[1:] == ["fetch", "--tags", "--depth=1"]
    assert (root / "update" / "all-cabal-hashes").is_dir()

    # a retry reuses the clone left behind
    retry = FakeRunner()
    GitIndexSync(GIT_URL, root, retry).sync(idx)
    assert retry.subcommands == ["fetch", "archive"]


def test_missing_git_is_fatal_and_touches_nothing(idx, root, no_git):
    idx.path.mkdir(parents=True)
    idx.tar_path.write_bytes(b"previous")
    idx.etag_path.write_bytes(b'"etag"')
    before = {p.name: p.read_bytes() for p in idx.path.iterdir()}
    runner = FakeRunner()

    with pytest.raises(ToolMissing) as excinfo:
        GitIndexSync(GIT_URL, root, runner).sync(idx)

    assert "install git" in str(excinfo.value)
    assert runner.calls == []
    assert {p.name: p.read_bytes() for p in idx.path.iterdir()} == before
    assert not root.exists()


def test_from_config(config):
    runner = FakeRunner()
    strategy = GitIndexSync.from_config(config, runner)
    assert strategy.git_url == config.git_url
    assert strategy.root_dir == config.root_dir
    assert strategy.gpg_verify is False
    assert strategy.runner is runner
