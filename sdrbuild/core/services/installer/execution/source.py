"""
L4 Execution — Source retrieval.

Every fetch starts from an empty workspace path: a stale checkout is
removed before cloning, so the result is always a pristine copy of
upstream.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from sdrbuild.core.models.manifest import ProjectSpec, Timeouts
from sdrbuild.core.models.result import StageResult
from sdrbuild.core.services.installer.data.constants import STAGE_FETCH, STAGE_WORKSPACE
from sdrbuild.core.services.installer.execution.subprocess_runner import _run_subprocess

logger = logging.getLogger(__name__)


def _clone_command(project: ProjectSpec, dest: Path) -> list[str]:
    cmd: list[str] = ["git", "clone"]
    if project.branch:
        cmd += ["--branch", project.branch]
    if project.depth:
        cmd += ["--depth", str(project.depth)]
    cmd += [project.url, str(dest)]
    return cmd


def fetch_source(
    project: ProjectSpec,
    workspace_root: Path,
    timeouts: Timeouts | None = None,
) -> StageResult:
    """Obtain a clean clone of ``project`` under ``workspace_root``.

    Step format::

        rm -rf <workspace_root>/<name>
        git clone [--branch B] [--depth N] <url> <workspace_root>/<name>

    Returns:
        Success with the checkout path in ``metadata["path"]``, or a
        Failed ``FetchError`` result if cleanup or clone failed.
    """
    timeouts = timeouts or Timeouts()
    dest = project.workspace(workspace_root)

    if dest.exists():
        logger.info("Removing existing %s directory...", project.name)
        try:
            shutil.rmtree(dest)
        except OSError as e:
            logger.error("Cannot remove %s: %s", dest, e)
            return StageResult.failure(
                STAGE_FETCH, project.name,
                f"Cannot clean workspace {dest}: {e}",
                error="FetchError",
                hint=f"Remove {dest} manually (check its permissions) and re-run",
            )

    logger.info("Cloning %s from %s...", project.name, project.url)
    cmd = _clone_command(project, dest)
    r = _run_subprocess(cmd, timeout=timeouts.fetch)
    if not r["ok"]:
        logger.error("Failed to clone %s", project.name)
        return StageResult.failure(
            STAGE_FETCH, project.name,
            r.get("error", "git clone failed"),
            error="FetchError",
            hint=f"Check network access to {project.url}",
            metadata={"stderr": r.get("stderr", ""), "command": cmd},
        )

    return StageResult.success(
        STAGE_FETCH, project.name, f"Cloned into {dest}",
        duration_ms=r.get("elapsed_ms", 0),
        metadata={"path": str(dest)},
    )


def prepare_workspace(workspace_root: Path) -> StageResult:
    """Create the top-level workspace directory for this run."""
    logger.info("Creating working directory: %s", workspace_root)
    try:
        workspace_root.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error("Cannot create %s: %s", workspace_root, e)
        return StageResult.failure(
            STAGE_WORKSPACE, str(workspace_root),
            f"Cannot create working directory: {e}",
            error="FetchError",
            hint=f"Check that {workspace_root.parent} is writable",
        )
    return StageResult.success(STAGE_WORKSPACE, str(workspace_root), "created")
