"""L0 Data — constants shared by every installer layer."""

from sdrbuild.core.services.installer.data.constants import (  # noqa: F401
    BUILD_TIMEOUT_TIERS,
    OUTPUT_TAIL_CHARS,
    STAGE_ORDER,
)
