"""
L5 Orchestration — pipeline driver and Reporter.
"""

from sdrbuild.core.services.installer.orchestration.pipeline import (  # noqa: F401
    confirmation_prompt,
    run_pipeline,
)
from sdrbuild.core.services.installer.orchestration.report import (  # noqa: F401
    cleanup_workspace,
    finish_report,
)
