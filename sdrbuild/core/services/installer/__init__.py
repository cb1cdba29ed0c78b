"""
Installer service — package re-exports.

Each symbol lives in its single-responsibility module inside the
appropriate onion layer (data → domain → detection → execution →
orchestration)::

    from sdrbuild.core.services.installer import run_pipeline
"""

# ── L1: Domain ──
from sdrbuild.core.services.installer.domain.errors import (  # noqa: F401
    BuildError,
    DependencyInstallError,
    FetchError,
    InstallerError,
    LinkRepairWarning,
    PatchError,
    PrerequisiteError,
    VerificationFailure,
)
from sdrbuild.core.services.installer.domain.patching import (  # noqa: F401
    apply_transforms,
)

# ── L3: Detection ──
from sdrbuild.core.services.installer.detection.environment import (  # noqa: F401
    probe_environment,
)
from sdrbuild.core.services.installer.detection.system_deps import (  # noqa: F401
    is_package_installed,
)

# ── L4: Execution ──
from sdrbuild.core.services.installer.execution.build_helpers import (  # noqa: F401
    build_project,
)
from sdrbuild.core.services.installer.execution.dependencies import (  # noqa: F401
    resolve_dependencies,
)
from sdrbuild.core.services.installer.execution.link_repair import (  # noqa: F401
    repair_links,
)
from sdrbuild.core.services.installer.execution.patch import (  # noqa: F401
    applied_patch,
)
from sdrbuild.core.services.installer.execution.source import (  # noqa: F401
    fetch_source,
)
from sdrbuild.core.services.installer.execution.verify import (  # noqa: F401
    verify_tools,
)

# ── L5: Orchestration ──
from sdrbuild.core.services.installer.orchestration.pipeline import (  # noqa: F401
    run_pipeline,
)
