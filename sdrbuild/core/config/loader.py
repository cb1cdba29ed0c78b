"""
Configuration loader — reads the installer manifest into domain models.

This is the primary entry point for loading what the installer should
build. It reads YAML, validates against Pydantic schemas, and returns
a typed ``InstallerManifest``.

Path resolution, in precedence order:
    explicit path (``--config``)  >  SDRBUILD_CONFIG env var  >  packaged default
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml

from sdrbuild.core.data import default_manifest_path
from sdrbuild.core.models.manifest import InstallerManifest

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "SDRBUILD_CONFIG"


class ConfigError(Exception):
    """Raised when the installer manifest is invalid or missing."""


def resolve_manifest_path(path: Path | None = None) -> Path:
    """Pick the manifest file to load."""
    if path is not None:
        return path
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return default_manifest_path()


def load_manifest(path: Path | None = None) -> InstallerManifest:
    """Load and validate the installer manifest.

    Args:
        path: Explicit manifest path. If None, uses the env var or the
            packaged default.

    Returns:
        Validated InstallerManifest model.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    path = resolve_manifest_path(path)

    if not path.is_file():
        raise ConfigError(f"Manifest not found: {path}")

    logger.debug("Loading manifest from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        manifest = InstallerManifest.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Invalid installer manifest: {e}") from e

    logger.debug(
        "Loaded manifest '%s' with %d packages and %d projects",
        manifest.name, len(manifest.packages), len(manifest.projects),
    )
    return manifest
