"""Configuration loading — manifest YAML into validated models."""

from sdrbuild.core.config.loader import (  # noqa: F401
    ConfigError,
    load_manifest,
    resolve_manifest_path,
)
