"""
L4 Execution — Dynamic-library reference repair.

Rewrites embedded library references (``@rpath/libacars-2.2.dylib``)
inside installed binaries to absolute installed paths. Repair is
idempotent: a binary that no longer carries the old reference is
skipped. Failures are warnings; the Verifier reports the symptom.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from sdrbuild.core.models.manifest import LibraryReference, LinkToolSettings, Timeouts
from sdrbuild.core.models.result import StageResult
from sdrbuild.core.observability.logging_config import log_success
from sdrbuild.core.services.installer.data.constants import STAGE_LINK_REPAIR
from sdrbuild.core.services.installer.execution.subprocess_runner import _run_subprocess

logger = logging.getLogger(__name__)


def _render(template: list[str], ref: LibraryReference) -> list[str]:
    """Replace ``{binary}``, ``{old}`` and ``{new}`` in a command template."""
    values = {"binary": ref.binary, "old": ref.old, "new": ref.new}
    rendered: list[str] = []
    for token in template:
        for key, value in values.items():
            token = token.replace(f"{{{key}}}", value)
        rendered.append(token)
    return rendered


def _references_old(
    ref: LibraryReference,
    settings: LinkToolSettings,
    timeout: int,
) -> bool | None:
    """Whether the binary still embeds ``ref.old``.

    Returns None when the inspect tool is unavailable or fails, so the
    caller can fall back to an unconditional rewrite.
    """
    if not settings.inspect_command or not shutil.which(settings.inspect_command[0]):
        return None
    r = _run_subprocess(_render(settings.inspect_command, ref), timeout=timeout, tail=False)
    if not r["ok"]:
        logger.debug("Inspect failed for %s: %s", ref.binary, r.get("error"))
        return None
    return ref.old in r.get("stdout", "")


def repair_reference(
    ref: LibraryReference,
    settings: LinkToolSettings | None = None,
    timeouts: Timeouts | None = None,
) -> StageResult:
    """Rewrite one reference in one binary, at most once."""
    settings = settings or LinkToolSettings()
    timeouts = timeouts or Timeouts()
    name = Path(ref.binary).name

    if not Path(ref.binary).is_file():
        logger.warning("%s not installed, skipping library path fix", ref.binary)
        return StageResult.skip(
            STAGE_LINK_REPAIR, name, f"{ref.binary} not present",
            metadata={"binary": ref.binary},
        )

    present = _references_old(ref, settings, timeouts.link)
    if present is False:
        logger.debug("%s already references %s", name, ref.new)
        return StageResult.skip(
            STAGE_LINK_REPAIR, name, f"no reference to {ref.old}",
            metadata={"binary": ref.binary},
        )

    cmd = _render(settings.rewrite_command, ref)
    r = _run_subprocess(cmd, needs_sudo=settings.needs_sudo, timeout=timeouts.link)
    if not r["ok"]:
        logger.warning("Could not fix library path for %s: %s", name, r.get("error", "unknown"))
        return StageResult.failure(
            STAGE_LINK_REPAIR, name,
            r.get("error", "rewrite failed"),
            error="LinkRepairWarning",
            hint=f"Run manually: {' '.join(cmd)}",
            fatal=False,
            metadata={"binary": ref.binary, "stderr": r.get("stderr", "")},
        )

    log_success(logger, "Fixed library path for %s", name)
    return StageResult.success(
        STAGE_LINK_REPAIR, name, f"{ref.old} -> {ref.new}",
        metadata={"binary": ref.binary, "inspected": present is not None},
    )


def repair_links(
    references: list[LibraryReference],
    settings: LinkToolSettings | None = None,
    timeouts: Timeouts | None = None,
) -> list[StageResult]:
    """Repair every reference of one project, in order."""
    if references:
        logger.info("Fixing library paths...")
    return [repair_reference(ref, settings, timeouts) for ref in references]
