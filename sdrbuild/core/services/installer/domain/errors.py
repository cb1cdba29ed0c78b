"""
L1 Domain — Installer error taxonomy (pure).

Fatal errors abort the remaining pipeline (the Reporter still runs);
warnings only degrade the final summary. Every error carries a
remediation hint that the Reporter prints verbatim.
"""

from __future__ import annotations


class InstallerError(Exception):
    """Base class for every pipeline error."""

    fatal: bool = True

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint


class PrerequisiteError(InstallerError):
    """An unmet host requirement. Raised before any mutation."""


class DependencyInstallError(InstallerError):
    """One or more system packages failed to install."""


class FetchError(InstallerError):
    """Source retrieval or workspace cleanup failed."""


class PatchError(InstallerError):
    """A source patch could not be backed up, applied or restored."""


class BuildError(InstallerError):
    """Configure, compile or install returned nonzero."""


class LinkRepairWarning(InstallerError):
    """A library reference could not be rewritten."""

    fatal = False


class VerificationFailure(InstallerError):
    """An installed tool is missing or does not respond."""

    fatal = False


class CleanupWarning(InstallerError):
    """The run's workspace could not be fully removed."""

    fatal = False


ERROR_CLASSES: dict[str, type[InstallerError]] = {
    cls.__name__: cls
    for cls in (
        PrerequisiteError,
        DependencyInstallError,
        FetchError,
        PatchError,
        BuildError,
        LinkRepairWarning,
        VerificationFailure,
        CleanupWarning,
    )
}


def error_from_name(name: str | None, message: str, hint: str | None = None) -> InstallerError:
    """Instantiate the taxonomy class named by a StageResult."""
    cls = ERROR_CLASSES.get(name or "", InstallerError)
    return cls(message, hint)
