"""
L4 Execution — Build-from-source helpers.

Plans and runs the CMake configure → compile → install sequence for
one project. Only the install step is privileged.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from sdrbuild.core.models.manifest import ProjectSpec, Timeouts
from sdrbuild.core.models.result import StageResult
from sdrbuild.core.services.installer.data.constants import BUILD_TIMEOUT_TIERS, STAGE_BUILD
from sdrbuild.core.services.installer.domain.error_analysis import _analyse_build_failure
from sdrbuild.core.services.installer.execution.subprocess_runner import _run_subprocess

logger = logging.getLogger(__name__)

BUILD_SUBDIR = "build"


def _job_count(project: ProjectSpec) -> int:
    """Parallel compile jobs: the project's hint, else every CPU."""
    return project.parallelism or os.cpu_count() or 1


def _cmake_plan(
    project: ProjectSpec,
    source_dir: Path,
    prefix: str,
    timeouts: Timeouts | None = None,
) -> list[dict]:
    """Generate plan steps for a CMake build.

    Produces three steps:
        1. ``cmake -S src -B src/build`` with prefix, rpath and project options
        2. ``cmake --build src/build -j N``
        3. ``cmake --install src/build`` with sudo

    The install rpath is the prefix's ``lib`` directory, so installed
    binaries find their shared libraries without DYLD_LIBRARY_PATH.

    Returns:
        Ordered list of step dicts ready for ``_execute_build_step()``.
    """
    timeouts = timeouts or Timeouts()
    build_dir = source_dir / BUILD_SUBDIR
    nproc = str(_job_count(project))
    lib_dir = f"{prefix.rstrip('/')}/lib"

    configure_cmd = [
        "cmake", "-S", str(source_dir), "-B", str(build_dir),
        f"-DCMAKE_INSTALL_PREFIX={prefix}",
        f"-DCMAKE_INSTALL_RPATH={lib_dir}",
    ]
    configure_cmd += [f"-D{key}={value}" for key, value in project.options.items()]

    return [
        {
            "phase": "configure",
            "label": "CMake configure",
            "command": configure_cmd,
            "cwd": str(source_dir),
            "needs_sudo": False,
            "timeout": timeouts.configure,
        },
        {
            "phase": "compile",
            "label": f"CMake build ({nproc} jobs)",
            "command": ["cmake", "--build", str(build_dir), "-j", nproc],
            "cwd": str(source_dir),
            "needs_sudo": False,
            "timeout": BUILD_TIMEOUT_TIERS.get(project.build_size, 600),
        },
        {
            "phase": "install",
            "label": f"CMake install to {prefix}",
            "command": ["cmake", "--install", str(build_dir)],
            "cwd": str(source_dir),
            "needs_sudo": True,
            "timeout": timeouts.install,
        },
    ]


def _execute_build_step(step: dict) -> dict[str, Any]:
    """Run one planned build step."""
    return _run_subprocess(
        step["command"],
        needs_sudo=step.get("needs_sudo", False),
        timeout=step.get("timeout", 600),
        cwd=step.get("cwd"),
    )


def build_project(
    project: ProjectSpec,
    source_dir: Path,
    prefix: str,
    timeouts: Timeouts | None = None,
) -> list[StageResult]:
    """Configure, compile and install ``project``.

    Stops at the first failing phase.

    Returns:
        One result per phase attempted; a failure is a fatal
        ``BuildError`` with a remediation hint when the error is
        recognised.
    """
    results: list[StageResult] = []
    logger.info("Building %s from source...", project.name)

    for step in _cmake_plan(project, source_dir, prefix, timeouts):
        phase = step["phase"]
        logger.info("%s: %s", project.name, step["label"])
        r = _execute_build_step(step)

        if r["ok"]:
            results.append(StageResult.success(
                STAGE_BUILD, project.name, f"{phase} succeeded",
                duration_ms=r.get("elapsed_ms", 0),
                metadata={"phase": phase},
            ))
            continue

        analysis = _analyse_build_failure(project.name, r.get("stderr", ""), phase)
        hint = analysis["suggestion"] if analysis else (
            f"Inspect the {phase} output above and re-run the installer"
        )
        logger.error("%s %s failed: %s", project.name, phase, r.get("error", "unknown"))
        for line in r.get("stderr", "").splitlines()[-15:]:
            logger.error("  %s", line)
        results.append(StageResult.failure(
            STAGE_BUILD, project.name,
            f"{phase} failed: {r.get('error', 'unknown error')}",
            error="BuildError",
            hint=hint,
            duration_ms=r.get("elapsed_ms", 0),
            metadata={
                "phase": phase,
                "command": step["command"],
                "stderr": r.get("stderr", ""),
                "analysis": analysis,
            },
        ))
        return results

    return results
