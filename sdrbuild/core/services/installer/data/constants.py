"""
L0 Data — Module-level constants.

Pure data. No logic. No imports beyond stdlib.
"""

from __future__ import annotations

# Build timeout tiers (seconds), keyed by ProjectSpec.build_size.
BUILD_TIMEOUT_TIERS: dict[str, int] = {
    "small": 300,    # < 10k LOC
    "medium": 600,   # 10k-100k LOC
    "large": 1200,   # 100k-1M LOC
    "huge": 3600,    # 1M+ LOC
}

# Stage names, in pipeline order. Reporter groups results by these.
STAGE_ENVIRONMENT = "environment"
STAGE_DEPENDENCIES = "dependencies"
STAGE_WORKSPACE = "workspace"
STAGE_FETCH = "fetch"
STAGE_PATCH = "patch"
STAGE_BUILD = "build"
STAGE_LINK_REPAIR = "link_repair"
STAGE_VERIFY = "verify"
STAGE_CLEANUP = "cleanup"

STAGE_ORDER: tuple[str, ...] = (
    STAGE_ENVIRONMENT,
    STAGE_DEPENDENCIES,
    STAGE_WORKSPACE,
    STAGE_FETCH,
    STAGE_PATCH,
    STAGE_BUILD,
    STAGE_LINK_REPAIR,
    STAGE_VERIFY,
    STAGE_CLEANUP,
)

# Keep this many trailing characters of captured process output.
OUTPUT_TAIL_CHARS = 2000
