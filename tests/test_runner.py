import sys

import pytest

from idxmirror.errors import CommandTimeout, SubprocessFailure
from idxmirror.runner import CommandRunner


def test_run_returns_stdout_and_uses_cwd(tmp_path):
    out = CommandRunner().run(tmp_path, sys.executable, ["-c", "import os; print(os.getcwd())"])
    assert out.strip() == str(tmp_path.resolve())


def test_non_zero_exit(tmp_path):
    with pytest.raises(SubprocessFailure) as excinfo:
        CommandRunner().run(
            tmp_path, sys.executable, ["-c", "import sys; sys.stderr.write('boom'); sys.exit(3)"]
        )
    assert excinfo.value.returncode == 3
    assert excinfo.value.stderr == "boom"
    assert excinfo.value.command == [sys.executable, "-c", "import sys; sys.stderr.write('boom'); sys.exit(3)"]
    assert "boom" in str(excinfo.value)


def test_timeout(tmp_path):
    with pytest.raises(CommandTimeout) as excinfo:
        CommandRunner(timeout=0.5).run(tmp_path, sys.executable, ["-c", "import time; time.sleep(10)"])
    assert excinfo.value.returncode is None
    assert "timed out" in str(excinfo.value)
