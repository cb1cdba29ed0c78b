"""
L5 Orchestration — The install pipeline driver.

Runs the stages in order, inspects every StageResult and decides
whether to continue::

    probe → confirm → dependencies → workspace
      → per project: fetch → patch → build → link repair
      → verify → report

Stages never raise for expected failures. The driver turns a fatal
result into the matching InstallerError, which ends the install
phase; verification and reporting still run afterwards.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from sdrbuild.core.models.manifest import InstallerManifest, ProjectSpec
from sdrbuild.core.models.result import InstallationReport, StageResult
from sdrbuild.core.observability.logging_config import log_success
from sdrbuild.core.services.installer.data.constants import (
    STAGE_BUILD,
    STAGE_FETCH,
    STAGE_PATCH,
)
from sdrbuild.core.services.installer.detection.environment import probe_environment
from sdrbuild.core.services.installer.domain.errors import InstallerError, error_from_name
from sdrbuild.core.services.installer.execution.build_helpers import build_project
from sdrbuild.core.services.installer.execution.dependencies import (
    resolve_dependencies,
    summarize_dependency_failures,
)
from sdrbuild.core.services.installer.execution.link_repair import repair_links
from sdrbuild.core.services.installer.execution.patch import applied_patch
from sdrbuild.core.services.installer.execution.source import fetch_source, prepare_workspace
from sdrbuild.core.services.installer.execution.verify import verify_tools
from sdrbuild.core.services.installer.orchestration.report import finish_report

logger = logging.getLogger(__name__)

Confirm = Callable[[str], bool]


def _gate(results: Iterable[StageResult]) -> None:
    """Raise the taxonomy error of the first fatal failure, if any."""
    for r in results:
        if r.aborts:
            message = f"{r.target}: {r.message}" if r.target else r.message
            raise error_from_name(r.error, message, r.hint)


def confirmation_prompt(manifest: InstallerManifest) -> str:
    names = [p.name for p in manifest.projects]
    if len(names) > 1:
        listed = ", ".join(names[:-1]) + f" and {names[-1]}"
    else:
        listed = "".join(names)
    return f"This will install {listed}. Continue?"


def _install_project(
    project: ProjectSpec,
    manifest: InstallerManifest,
    report: InstallationReport,
) -> None:
    """Fetch → patch → build → link repair for one project."""
    root = manifest.workspace_root
    timeouts = manifest.timeouts

    _gate([report.record(fetch_source(project, root, timeouts))])
    source_dir = project.workspace(root)

    if project.patch is not None:
        with applied_patch(project.patch, source_dir, report.record, project.name) as applied:
            _gate([applied])
            _gate(report.extend(build_project(project, source_dir, manifest.prefix, timeouts)))
        # restore outcome
        _gate(report.stage(STAGE_PATCH)[-1:])
    else:
        _gate(report.extend(build_project(project, source_dir, manifest.prefix, timeouts)))

    report.extend(repair_links(project.library_references(), manifest.link_tool, timeouts))
    log_success(logger, "%s installation completed", project.name)


def _install(
    manifest: InstallerManifest,
    report: InstallationReport,
    confirm: Confirm,
) -> None:
    logger.info("%s installer", manifest.description or manifest.name)

    _gate(report.extend(probe_environment(manifest)))

    if not confirm(confirmation_prompt(manifest)):
        report.declined = True
        logger.info("Installation cancelled")
        return

    logger.info("Starting %s installation...", manifest.name)
    deps = report.extend(resolve_dependencies(manifest.packages, manifest.timeouts))
    summary = summarize_dependency_failures(deps)
    if summary is not None:
        _gate([summary])

    _gate([report.record(prepare_workspace(manifest.workspace_root))])

    for project in manifest.projects:
        _install_project(project, manifest, report)


def _verify_due(report: InstallationReport) -> bool:
    """Verification runs once any project reached the fetch stage."""
    return not report.declined and bool(report.stage(STAGE_FETCH))


def run_pipeline(
    manifest: InstallerManifest,
    *,
    confirm: Confirm,
    as_json: bool = False,
) -> InstallationReport:
    """Run a complete install and return the finalized report.

    Args:
        manifest: What to install.
        confirm: Asked once, before any mutation. False ends the run
            with no side effects.
        as_json: Render the report as JSON instead of text.

    Returns:
        The finalized InstallationReport; ``report.exit_code`` is the
        process exit status.
    """
    report = InstallationReport(name=manifest.name)
    try:
        try:
            _install(manifest, report, confirm)
        except InstallerError as e:
            report.abort(type(e).__name__, e.message, e.hint)
            logger.error("%s", e.message)
            if e.hint:
                logger.info(e.hint)
            failed_builds = [r for r in report.stage(STAGE_BUILD) if r.failed]
            if failed_builds:
                logger.warning("Skipping library repair for %s", failed_builds[-1].target)

        if _verify_due(report):
            report.extend(verify_tools(manifest.verify, manifest.timeouts))
    finally:
        finish_report(report, manifest, as_json=as_json)
    return report
