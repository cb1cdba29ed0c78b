"""
ACARS SDR installer — CLI entrypoint.

Usage:
    sdrbuild
    sdrbuild --yes --json
    python -m sdrbuild --config my-manifest.yml
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import click

from sdrbuild import __version__
from sdrbuild.core.config.loader import ConfigError, load_manifest
from sdrbuild.core.observability.logging_config import setup_logging


def _ask(prompt: str, err: bool = False) -> bool:
    """Interactive confirmation; anything but yes declines."""
    try:
        return click.confirm(prompt, default=False, err=err)
    except click.Abort:
        click.echo(err=err)
        return False


@click.command(context_settings={"help_option_names": ["--help", "-h"]})
@click.version_option(version=__version__, prog_name="sdrbuild")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Only show warnings and errors.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    default=None,
    help="Path to an installer manifest (default: packaged acars.yml).",
)
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Do not ask for confirmation.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output the report as JSON.")
def cli(
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: Path | None,
    assume_yes: bool,
    as_json: bool,
) -> None:
    """Build and install libacars and acarsdec from source."""
    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "WARNING"
    else:
        level = os.environ.get("SDRBUILD_LOG_LEVEL", "INFO")

    setup_logging(
        level=level,
        log_file=os.environ.get("SDRBUILD_LOG_FILE"),
        log_file_level=os.environ.get("SDRBUILD_LOG_FILE_LEVEL"),
        # JSON goes to stdout; keep it parseable
        stream=sys.stderr if as_json else None,
    )

    try:
        manifest = load_manifest(config_path)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(2)

    from sdrbuild.core.services.installer.orchestration.pipeline import run_pipeline

    # with --json only the report goes to stdout
    confirm = (lambda _prompt: True) if assume_yes else (lambda prompt: _ask(prompt, err=as_json))
    report = run_pipeline(manifest, confirm=confirm, as_json=as_json)
    sys.exit(report.exit_code)


if __name__ == "__main__":
    cli()
