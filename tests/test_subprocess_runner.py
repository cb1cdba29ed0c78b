"""
Tests for the subprocess runner — real short-lived commands.
"""

import shutil
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from sdrbuild.core.services.installer.data.constants import OUTPUT_TAIL_CHARS
from sdrbuild.core.services.installer.execution.subprocess_runner import _run_subprocess

pytestmark = pytest.mark.skipif(shutil.which("sh") is None, reason="sh not available")

_RUNNER = "sdrbuild.core.services.installer.execution.subprocess_runner"


def _sh(script: str) -> list[str]:
    return ["sh", "-c", script]


def _completed(returncode: int = 0) -> MagicMock:
    return MagicMock(returncode=returncode, stdout="", stderr="")


class TestOutcome:
    def test_success(self):
        r = _run_subprocess(_sh("echo hello; echo oops >&2"))
        assert r["ok"] is True
        assert r["returncode"] == 0
        assert r["stdout"] == "hello\n"
        assert r["stderr"] == "oops\n"
        assert r["elapsed_ms"] >= 0

    def test_nonzero_exit(self):
        r = _run_subprocess(_sh("echo broken >&2; exit 3"))
        assert r["ok"] is False
        assert r["returncode"] == 3
        assert "exit 3" in r["error"]
        assert r["stderr"] == "broken\n"
        assert "timed_out" not in r

    def test_timeout(self):
        r = _run_subprocess(_sh("sleep 2"), timeout=1)
        assert r["ok"] is False
        assert r["timed_out"] is True
        assert r["returncode"] is None
        assert "timed out (1s)" in r["error"]

    def test_command_not_found(self):
        r = _run_subprocess(["sdrbuild-no-such-command"])
        assert r["ok"] is False
        assert r["returncode"] is None
        assert r["error"] == "Command not found: sdrbuild-no-such-command"

    def test_closed_stdin(self):
        r = _run_subprocess(_sh("cat"), stdin_text="", timeout=5)
        assert r["ok"] is True
        assert r["stdout"] == ""

    def test_cwd_and_env(self, tmp_path: Path):
        r = _run_subprocess(
            _sh('pwd; echo "$SDRBUILD_TEST_VALUE"'),
            cwd=str(tmp_path),
            env_overrides={"SDRBUILD_TEST_VALUE": "from-override"},
        )
        assert r["ok"] is True
        lines = r["stdout"].splitlines()
        assert Path(lines[0]).resolve() == tmp_path.resolve()
        assert lines[1] == "from-override"

    def test_os_error_is_a_failure(self):
        with patch(f"{_RUNNER}.subprocess.run", side_effect=PermissionError("denied")):
            r = _run_subprocess(["git", "clone", "x"])
        assert r["ok"] is False
        assert r["returncode"] is None
        assert "denied" in r["error"]


class TestOutputTail:
    LONG = "i=0; while [ $i -lt 400 ]; do echo \"line $i of the listing\"; i=$((i+1)); done"

    def test_long_output_keeps_the_tail(self):
        r = _run_subprocess(_sh(self.LONG))
        assert len(r["stdout"]) == OUTPUT_TAIL_CHARS
        assert r["stdout"].endswith("line 399 of the listing\n")
        assert "line 0 of" not in r["stdout"]

    def test_full_output_on_request(self):
        r = _run_subprocess(_sh(self.LONG), tail=False)
        assert len(r["stdout"]) > OUTPUT_TAIL_CHARS
        assert r["stdout"].startswith("line 0 of the listing\n")

    def test_full_output_on_failure(self):
        r = _run_subprocess(_sh(self.LONG + " >&2; exit 2"), tail=False)
        assert r["returncode"] == 2
        assert r["stderr"].startswith("line 0 of the listing\n")


class TestSudo:
    def test_prefixed_when_not_root(self):
        with patch(f"{_RUNNER}.os.geteuid", return_value=1000), \
             patch(f"{_RUNNER}.subprocess.run", return_value=_completed()) as run:
            _run_subprocess(["cmake", "--install", "build"], needs_sudo=True)
        assert run.call_args.args[0] == ["sudo", "cmake", "--install", "build"]

    def test_dropped_when_root(self):
        with patch(f"{_RUNNER}.os.geteuid", return_value=0), \
             patch(f"{_RUNNER}.subprocess.run", return_value=_completed()) as run:
            _run_subprocess(["cmake", "--install", "build"], needs_sudo=True)
        assert run.call_args.args[0] == ["cmake", "--install", "build"]

    def test_not_requested(self):
        with patch(f"{_RUNNER}.os.geteuid", return_value=1000), \
             patch(f"{_RUNNER}.subprocess.run", return_value=_completed()) as run:
            _run_subprocess(["git", "clone", "x"])
        assert run.call_args.args[0] == ["git", "clone", "x"]
