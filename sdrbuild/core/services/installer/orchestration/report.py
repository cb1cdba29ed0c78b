"""
L5 Orchestration — Reporter.

Turns the accumulated InstallationReport into the user-facing summary
and usage guide, and removes the run's workspace. Always the last
thing a run does, whatever happened before it.
"""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path

import click

from sdrbuild.core.models.manifest import InstallerManifest
from sdrbuild.core.models.result import InstallationReport, StageResult
from sdrbuild.core.observability.logging_config import log_success
from sdrbuild.core.services.installer.data.constants import STAGE_CLEANUP, STAGE_ORDER

logger = logging.getLogger(__name__)

_ICONS = {
    "success": "✅",
    "skipped": "⏭️ ",
    "failed": "❌",
}


def cleanup_workspace(workspace_root: Path) -> StageResult:
    """Delete the run's workspace directory. Never fatal."""
    if not workspace_root.exists():
        return StageResult.skip(STAGE_CLEANUP, str(workspace_root), "nothing to clean")

    logger.info("Cleaning up build directory...")
    shutil.rmtree(workspace_root, ignore_errors=True)
    if workspace_root.exists():
        logger.warning("Could not fully remove %s", workspace_root)
        return StageResult.failure(
            STAGE_CLEANUP, str(workspace_root),
            f"could not fully remove {workspace_root}",
            error="CleanupWarning",
            hint=f"Delete it by hand: rm -rf {workspace_root}",
            fatal=False,
        )
    return StageResult.success(STAGE_CLEANUP, str(workspace_root), "removed")


def _icon(result: StageResult) -> str:
    if result.failed and not result.fatal:
        return "⚠️ "
    return _ICONS[result.outcome]


def render_summary(report: InstallationReport) -> None:
    """Print one line per result, grouped in pipeline stage order."""
    click.secho("Installation summary:", fg="cyan", bold=True)
    for stage in STAGE_ORDER:
        for r in report.stage(stage):
            line = f"   {_icon(r)} {stage:<13} {r.target}"
            if r.message:
                line += f" — {r.message}"
            click.echo(line)
    click.echo()

    if report.declined:
        click.secho("Installation cancelled — nothing was changed", fg="yellow")
        return

    if report.aborted:
        click.secho(f"❌ {report.aborted_by}: {report.abort_message}", fg="red", bold=True)
        if report.abort_hint:
            click.echo(f"   💡 {report.abort_hint}")
    elif report.all_tools_healthy:
        click.secho("✅ All tools healthy", fg="green", bold=True)
    else:
        click.secho("⚠️  Some tools may have issues", fg="yellow", bold=True)

    for r in report.warnings:
        if r.hint:
            click.echo(f"   💡 {r.target}: {r.hint}")
    click.echo()


def render_usage(manifest: InstallerManifest) -> None:
    """Print the static usage guide for the installed tools."""
    logger.info("Installation completed! Here's how to use the tools:")
    click.echo()
    for section in manifest.usage:
        click.secho(section.title, fg="green")
        for line in section.lines:
            click.echo(f"  {line}")
        click.echo()
    for note in manifest.notes:
        click.echo(f"{click.style('Note:', fg='yellow')} {note}")
    if manifest.notes:
        click.echo()


def finish_report(
    report: InstallationReport,
    manifest: InstallerManifest,
    *,
    as_json: bool = False,
) -> InstallationReport:
    """Clean up, finalize and render the report. Called exactly once per run."""
    if not report.declined:
        report.record(cleanup_workspace(manifest.workspace_root))
    report.finalize()

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        return report

    render_summary(report)
    if not report.declined and not report.aborted:
        render_usage(manifest)
        log_success(logger, "Installation complete!")
    return report
