"""
L4 Execution — ``__init__.py`` re-exports all execution functions.

These functions WRITE to the system: package installs, clones,
patched files, builds, privileged installs and binary rewrites.
"""

from sdrbuild.core.services.installer.execution.build_helpers import (  # noqa: F401
    _cmake_plan,
    _execute_build_step,
    build_project,
)
from sdrbuild.core.services.installer.execution.dependencies import (  # noqa: F401
    resolve_dependencies,
    summarize_dependency_failures,
)
from sdrbuild.core.services.installer.execution.link_repair import (  # noqa: F401
    repair_links,
    repair_reference,
)
from sdrbuild.core.services.installer.execution.patch import (  # noqa: F401
    applied_patch,
    backup_and_apply,
    restore_patch,
)
from sdrbuild.core.services.installer.execution.source import (  # noqa: F401
    fetch_source,
    prepare_workspace,
)
from sdrbuild.core.services.installer.execution.subprocess_runner import (  # noqa: F401
    _run_subprocess,
)
from sdrbuild.core.services.installer.execution.verify import (  # noqa: F401
    verify_tool,
    verify_tools,
)
