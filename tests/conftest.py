import io
import tarfile
from pathlib import Path

import pytest
from requests.structures import CaseInsensitiveDict

from idxmirror.config import Config
from idxmirror.errors import SubprocessFailure


def make_index_tar(path, files, dirs=()):
    """Write an uncompressed tarball with `files` (name -> bytes) and directory entries."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with tarfile.open(path, "w") as tar:
        for d in dirs:
            info = tarfile.TarInfo(d)
            info.type = tarfile.DIRTYPE
            info.mode = 0o755
            tar.addfile(info)
        for name, data in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return path


def tar_bytes(files):
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w") as tar:
        for name, data in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return buf.getvalue()


class FakeRunner:
    """Records git invocations instead of running them."""

    def __init__(self, fail_on=(), on_clone=None):
        self.calls = []
        self.fail_on = set(fail_on)
        self.on_clone = on_clone

    def run(self, cwd, executable, args):
        args = list(args)
        self.calls.append((Path(cwd), str(executable), args))
        if args[0] in self.fail_on:
            raise SubprocessFailure([str(executable), *args], 128, "fatal: something went wrong")
        if args[0] == "clone":
            # git clone <url> <name> creates <cwd>/<name>
            (Path(cwd) / args[2]).mkdir(parents=True)
        return ""

    @property
    def subcommands(self):
        return [c[2][0] for c in self.calls]


class FakeResponse:
    def __init__(self, status_code, body=b"", headers=None):
        self.status_code = status_code
        self.body = body
        self.headers = CaseInsensitiveDict(headers or {})
        self.closed = False

    def iter_content(self, chunk_size=1):
        for i in range(0, len(self.body), chunk_size):
            yield self.body[i:i + chunk_size]

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True
        return False


class FakeDownloader:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []
        self.closed = False

    def open(self, url, headers=None):
        self.requests.append((url, dict(headers or {})))
        if self.error is not None:
            raise self.error
        return self.response

    def close(self):
        self.closed = True


@pytest.fixture
def config(tmp_path):
    cfg_path = tmp_path / "conf" / "idxmirror.conf"
    cfg_path.parent.mkdir()
    cfg_path.write_text(
        "[general]\n"
        f"root_dir = {tmp_path / 'root'}\n"
        f"index_dir = {tmp_path / 'index'}\n"
        "\n"
        "[index]\n"
        "git_url = https://example.com/mirrors/all-cabal-hashes.git\n"
        "http_url = https://example.com/00-index.tar.gz\n"
        "gpg_verify = false\n"
    )
    return Config(cfg_path)


@pytest.fixture
def git_on_path(monkeypatch):
    monkeypatch.setattr("shutil.which", lambda name, *a, **kw: "/usr/bin/git" if name == "git" else None)


@pytest.fixture
def no_git(monkeypatch):
    monkeypatch.setattr("shutil.which", lambda name, *a, **kw: None)
