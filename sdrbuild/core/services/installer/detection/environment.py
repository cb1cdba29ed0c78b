"""
L3 Detection — Host environment prerequisites.

Read-only probes: OS identity and presence of the commands the
pipeline drives (package manager, version control, build
configuration). Nothing here executes or mutates anything.
"""

from __future__ import annotations

import logging
import platform
import shutil

from sdrbuild.core.models.manifest import InstallerManifest
from sdrbuild.core.models.result import StageResult
from sdrbuild.core.observability.logging_config import log_success
from sdrbuild.core.services.installer.data.constants import STAGE_ENVIRONMENT

logger = logging.getLogger(__name__)


def host_platform() -> str:
    """Lower-cased OS identity (``darwin``, ``linux``, ...)."""
    return platform.system().lower()


def probe_environment(manifest: InstallerManifest) -> list[StageResult]:
    """Check the host against the manifest's prerequisites, in order.

    The OS identity is checked first, then each prerequisite command
    in manifest order. The first unmet check ends the probe with a
    Failed result carrying the remediation hint.

    Returns:
        One result per check performed; only the last can be Failed.
    """
    results: list[StageResult] = []

    system = host_platform()
    if not system.startswith(manifest.platform.lower()):
        logger.error("This installer is designed for %s only (host: %s)", manifest.platform, system)
        results.append(StageResult.failure(
            STAGE_ENVIRONMENT, "platform",
            f"Host OS is '{system}', this installer requires '{manifest.platform}'",
            error="PrerequisiteError",
            hint=f"Run this installer on a {manifest.platform} host",
        ))
        return results
    results.append(StageResult.success(STAGE_ENVIRONMENT, "platform", f"Host OS is {system}"))

    for prereq in manifest.prerequisites:
        found = shutil.which(prereq.command)
        if not found:
            logger.error("%s is required but not installed", prereq.name)
            if prereq.hint:
                logger.info(prereq.hint)
            results.append(StageResult.failure(
                STAGE_ENVIRONMENT, prereq.name,
                f"{prereq.name} is required but '{prereq.command}' is not on PATH",
                error="PrerequisiteError",
                hint=prereq.hint or f"Install {prereq.name} and re-run the installer",
            ))
            return results
        logger.debug("Found %s at %s", prereq.command, found)
        results.append(StageResult.success(
            STAGE_ENVIRONMENT, prereq.name, f"{prereq.name} found at {found}",
        ))

    log_success(logger, "All prerequisites satisfied")
    return results
