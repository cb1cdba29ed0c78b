"""
L1 Domain — pure logic: error taxonomy, patch interpreter, failure analysis.

No subprocess, no filesystem access.
"""

from sdrbuild.core.services.installer.domain.error_analysis import (  # noqa: F401
    _analyse_build_failure,
)
from sdrbuild.core.services.installer.domain.errors import (  # noqa: F401
    BuildError,
    DependencyInstallError,
    FetchError,
    InstallerError,
    LinkRepairWarning,
    PatchError,
    PrerequisiteError,
    VerificationFailure,
    error_from_name,
)
from sdrbuild.core.services.installer.domain.patching import (  # noqa: F401
    TransformError,
    apply_transforms,
)
