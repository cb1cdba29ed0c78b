"""
Domain models — Pydantic types for the installer.

All models are re-exported here for convenient access:

    from sdrbuild.core.models import InstallerManifest, ProjectSpec, StageResult
"""

from sdrbuild.core.models.manifest import (
    InstallerManifest,
    LibraryReference,
    LineRangeTransform,
    LinkReferenceRule,
    LinkToolSettings,
    PackageSpec,
    PatchDescriptor,
    PrerequisiteSpec,
    ProjectSpec,
    Timeouts,
    UsageSection,
    VerifySettings,
)
from sdrbuild.core.models.result import InstallationReport, StageResult

__all__ = [
    # result.py
    "InstallationReport",
    # manifest.py
    "InstallerManifest",
    "LibraryReference",
    "LineRangeTransform",
    "LinkReferenceRule",
    "LinkToolSettings",
    "PackageSpec",
    "PatchDescriptor",
    "PrerequisiteSpec",
    "ProjectSpec",
    "StageResult",
    "Timeouts",
    "UsageSection",
    "VerifySettings",
]
