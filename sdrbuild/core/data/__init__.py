"""
Packaged data — the default installer manifest.

Usage::

    from sdrbuild.core.data import default_manifest_path

    path = default_manifest_path()   # .../core/data/acars.yml
"""

from __future__ import annotations

from pathlib import Path

_DATA_DIR = Path(__file__).parent

DEFAULT_MANIFEST = "acars.yml"


def default_manifest_path() -> Path:
    """Return the path of the manifest shipped with the package."""
    return _DATA_DIR / DEFAULT_MANIFEST
