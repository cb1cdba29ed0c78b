"""
L4 Execution — Installed tool liveness probe.

Checks that each expected tool is on PATH and starts without dying
on an unresolved library. This is a liveness check only: it cannot
tell whether a tool decodes correctly, and a tool that exits 1 for
an unrelated reason also passes.
"""

from __future__ import annotations

import logging
import re
import shutil

from sdrbuild.core.models.manifest import Timeouts, VerifySettings
from sdrbuild.core.models.result import StageResult
from sdrbuild.core.observability.logging_config import log_success
from sdrbuild.core.services.installer.data.constants import STAGE_VERIFY
from sdrbuild.core.services.installer.execution.subprocess_runner import _run_subprocess

logger = logging.getLogger(__name__)


def _probe(binary: str, settings: VerifySettings, timeout: int) -> str | None:
    """Run the probes in order and return the one that passed, or None.

    Order: each help flag exits 0, then a bare invocation whose output
    mentions the usage pattern, then a bare invocation exiting with
    an accepted status.
    """
    for flag in settings.help_flags:
        r = _run_subprocess([binary, flag], timeout=timeout, stdin_text="")
        if r["ok"]:
            return flag

    bare = _run_subprocess([binary], timeout=timeout, stdin_text="", tail=False)
    output = bare.get("stdout", "") + bare.get("stderr", "")
    if re.search(settings.usage_pattern, output, re.IGNORECASE):
        return "usage"
    if bare.get("returncode") in settings.accepted_exit_codes:
        return f"exit {bare['returncode']}"
    return None


def verify_tool(
    tool: str,
    settings: VerifySettings | None = None,
    timeouts: Timeouts | None = None,
) -> StageResult:
    """Check one tool: on PATH, then responds to a probe."""
    settings = settings or VerifySettings()
    timeouts = timeouts or Timeouts()

    binary = shutil.which(tool)
    if not binary:
        logger.error("%s not found in PATH", tool)
        return StageResult.failure(
            STAGE_VERIFY, tool, "not found in PATH",
            error="VerificationFailure",
            hint="Make sure the install prefix's bin directory is on PATH",
            fatal=False,
        )

    passed = _probe(binary, settings, timeouts.verify)
    if passed is None:
        logger.error("%s installed but may have library issues", tool)
        return StageResult.failure(
            STAGE_VERIFY, tool, "installed but did not respond (library issues?)",
            error="VerificationFailure",
            hint=f"Run '{tool} --help' to see the loader error",
            fatal=False,
            metadata={"path": binary},
        )

    log_success(logger, "%s installed and working", tool)
    return StageResult.success(
        STAGE_VERIFY, tool, "installed and working",
        metadata={"path": binary, "probe": passed},
    )


def verify_tools(
    settings: VerifySettings,
    timeouts: Timeouts | None = None,
) -> list[StageResult]:
    """Probe every expected tool. Never fatal."""
    logger.info("Verifying installation...")
    results = [verify_tool(tool, settings, timeouts) for tool in settings.tools]
    if results and all(r.ok for r in results):
        log_success(logger, "All tools installed successfully!")
    else:
        logger.warning("Some tools may have issues")
    return results
