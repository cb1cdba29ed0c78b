"""
L3 Detection — read-only probes of the host.
"""

from sdrbuild.core.services.installer.detection.environment import (  # noqa: F401
    host_platform,
    probe_environment,
)
from sdrbuild.core.services.installer.detection.system_deps import (  # noqa: F401
    _is_pkg_installed,
    is_package_installed,
)
