"""
L4 Execution — System dependency resolution.

Installs only the packages whose installed predicate is false.
Every package is attempted even after a failure; the pipeline
decides afterwards whether the batch is fatal.
"""

from __future__ import annotations

import logging

from sdrbuild.core.models.manifest import PackageSpec, Timeouts
from sdrbuild.core.models.result import StageResult
from sdrbuild.core.observability.logging_config import log_success
from sdrbuild.core.services.installer.data.constants import STAGE_DEPENDENCIES
from sdrbuild.core.services.installer.detection.system_deps import is_package_installed
from sdrbuild.core.services.installer.execution.subprocess_runner import _run_subprocess

logger = logging.getLogger(__name__)


def resolve_dependencies(
    packages: list[PackageSpec],
    timeouts: Timeouts | None = None,
) -> list[StageResult]:
    """Ensure each package is present, installing only what is missing.

    Args:
        packages: Ordered package declarations.
        timeouts: Per-invocation limits (defaults if omitted).

    Returns:
        One result per package: Skipped (already installed),
        Success (installed now) or Failed (install action failed).
    """
    timeouts = timeouts or Timeouts()
    results: list[StageResult] = []

    logger.info("Installing dependencies...")
    for spec in packages:
        if is_package_installed(spec, timeout=timeouts.package_check):
            log_success(logger, "%s already installed", spec.name)
            results.append(StageResult.skip(
                STAGE_DEPENDENCIES, spec.name, "already installed",
            ))
            continue

        logger.info("Installing %s...", spec.name)
        argv = spec.install_argv()
        r = _run_subprocess(
            argv,
            needs_sudo=spec.install_needs_sudo,
            timeout=timeouts.package_install,
        )
        if r["ok"]:
            log_success(logger, "%s installed", spec.name)
            results.append(StageResult.success(
                STAGE_DEPENDENCIES, spec.name, "installed",
                duration_ms=r.get("elapsed_ms", 0),
            ))
        else:
            logger.error("Failed to install %s: %s", spec.name, r.get("error", "unknown"))
            results.append(StageResult.failure(
                STAGE_DEPENDENCIES, spec.name,
                r.get("error", "install failed"),
                error="DependencyInstallError",
                hint=spec.remediation(),
                metadata={"stderr": r.get("stderr", ""), "command": argv},
            ))

    return results


def summarize_dependency_failures(results: list[StageResult]) -> StageResult | None:
    """Fold per-package failures into one fatal result, or None if all passed."""
    failed = [r for r in results if r.failed]
    if not failed:
        return None
    names = [r.target for r in failed]
    hints = [r.hint for r in failed if r.hint]
    return StageResult.failure(
        STAGE_DEPENDENCIES, ", ".join(names),
        f"{len(failed)} package(s) failed to install: {', '.join(names)}",
        error="DependencyInstallError",
        hint="; ".join(hints) if hints else None,
    )
