"""
L4 Execution — Core subprocess runner.

The SINGLE PLACE where ``subprocess.run`` is called for installer
operations. Timeouts, sudo, output capture and error handling are
centralised here.
"""

from __future__ import annotations

import logging
import os
import subprocess
import time
from typing import Any

from sdrbuild.core.services.installer.data.constants import OUTPUT_TAIL_CHARS

logger = logging.getLogger(__name__)


def _tail(text: str | None, tail: bool = True) -> str:
    if not text:
        return ""
    return text[-OUTPUT_TAIL_CHARS:] if tail else text


def _run_subprocess(
    cmd: list[str],
    *,
    needs_sudo: bool = False,
    timeout: int = 120,
    env_overrides: dict[str, str] | None = None,
    cwd: str | None = None,
    stdin_text: str | None = None,
    tail: bool = True,
) -> dict[str, Any]:
    """Run a subprocess command with sudo, env and timeout support.

    Sudo is requested by prefixing ``sudo``; it prompts on the
    controlling terminal, so the password never passes through this
    process. When already root the prefix is dropped.

    Args:
        cmd: Command list for ``subprocess.run()``.
        needs_sudo: Whether the command requires root.
        timeout: Seconds before the invocation counts as failed.
        env_overrides: Extra env vars.
        cwd: Working directory for the command.
        stdin_text: Text fed to stdin. ``""`` closes stdin immediately.
        tail: Keep only the last ``OUTPUT_TAIL_CHARS`` of stdout/stderr.
            Pass False when the caller searches the output.

    Returns:
        ``{"ok": True, "returncode": 0, "stdout": "...", ...}`` on success,
        ``{"ok": False, "error": "...", "returncode": N|None, ...}`` on failure.
    """
    # ── Sudo handling ──
    if needs_sudo and os.geteuid() != 0:
        cmd = ["sudo"] + cmd

    # ── Environment ──
    env = os.environ.copy()
    if env_overrides:
        for key, value in env_overrides.items():
            env[key] = os.path.expandvars(value)

    logger.debug("Running: %s (cwd=%s)", " ".join(cmd), cwd)

    # ── Execute ──
    start = time.monotonic()
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
            input=stdin_text,
            env=env,
            cwd=cwd,
        )
    except subprocess.TimeoutExpired:
        return {
            "ok": False,
            "returncode": None,
            "timed_out": True,
            "error": f"Command timed out ({timeout}s): {' '.join(cmd)}",
        }
    except FileNotFoundError:
        return {
            "ok": False,
            "returncode": None,
            "error": f"Command not found: {cmd[0]}",
        }
    except OSError as e:
        logger.exception("Subprocess error: %s", cmd)
        return {"ok": False, "returncode": None, "error": str(e)}

    elapsed_ms = int((time.monotonic() - start) * 1000)

    if result.returncode == 0:
        return {
            "ok": True,
            "returncode": 0,
            "stdout": _tail(result.stdout, tail),
            "stderr": _tail(result.stderr, tail),
            "elapsed_ms": elapsed_ms,
        }

    return {
        "ok": False,
        "returncode": result.returncode,
        "error": f"Command failed (exit {result.returncode}): {' '.join(cmd)}",
        "stdout": _tail(result.stdout, tail),
        "stderr": _tail(result.stderr, tail),
        "elapsed_ms": elapsed_ms,
    }
