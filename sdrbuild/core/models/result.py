"""
StageResult and InstallationReport — the pipeline's execution contract.

Every stage returns StageResults; it never raises for an expected
failure. The pipeline driver reads the outcome to decide whether to
continue, and the Reporter renders the accumulated report.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

Outcome = Literal["success", "skipped", "failed"]


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class StageResult(BaseModel):
    """Outcome of one stage applied to one target.

    ``error`` names the error class from the installer taxonomy
    (``BuildError``, ``LinkRepairWarning``, …) when the stage failed.
    """

    stage: str
    target: str = ""
    outcome: Outcome = "success"
    message: str = ""
    hint: str | None = None
    error: str | None = None
    fatal: bool = True

    started_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.outcome == "success"

    @property
    def skipped(self) -> bool:
        return self.outcome == "skipped"

    @property
    def failed(self) -> bool:
        return self.outcome == "failed"

    @property
    def aborts(self) -> bool:
        """Whether this result must stop the pipeline."""
        return self.failed and self.fatal

    @classmethod
    def success(cls, stage: str, target: str = "", message: str = "", **kwargs: Any) -> StageResult:
        """Create a success result."""
        return cls(stage=stage, target=target, outcome="success", message=message, **kwargs)

    @classmethod
    def skip(cls, stage: str, target: str = "", reason: str = "", **kwargs: Any) -> StageResult:
        """Create a skipped result."""
        return cls(stage=stage, target=target, outcome="skipped", message=reason, **kwargs)

    @classmethod
    def failure(
        cls,
        stage: str,
        target: str = "",
        message: str = "",
        *,
        error: str,
        hint: str | None = None,
        fatal: bool = True,
        **kwargs: Any,
    ) -> StageResult:
        """Create a failure result."""
        return cls(
            stage=stage,
            target=target,
            outcome="failed",
            message=message,
            error=error,
            hint=hint,
            fatal=fatal,
            **kwargs,
        )


@dataclass
class InstallationReport:
    """Accumulator for one pipeline run.

    Created when the pipeline starts, appended to by every stage and
    finalized exactly once before rendering.
    """

    name: str = ""
    results: list[StageResult] = field(default_factory=list)
    declined: bool = False
    aborted_by: str | None = None       # error class name
    abort_message: str = ""
    abort_hint: str | None = None
    started_at: str = field(default_factory=_now_iso)
    finished_at: str | None = None
    _finalized: bool = field(default=False, repr=False)

    def record(self, result: StageResult) -> StageResult:
        if self._finalized:
            raise RuntimeError("InstallationReport is already finalized")
        self.results.append(result)
        return result

    def extend(self, results: list[StageResult]) -> list[StageResult]:
        for result in results:
            self.record(result)
        return results

    def abort(self, error: str, message: str, hint: str | None = None) -> None:
        self.aborted_by = error
        self.abort_message = message
        self.abort_hint = hint

    def finalize(self) -> InstallationReport:
        if self._finalized:
            raise RuntimeError("InstallationReport can only be finalized once")
        self._finalized = True
        self.finished_at = _now_iso()
        return self

    @property
    def finalized(self) -> bool:
        return self._finalized

    def stage(self, name: str) -> list[StageResult]:
        return [r for r in self.results if r.stage == name]

    @property
    def failures(self) -> list[StageResult]:
        return [r for r in self.results if r.failed]

    @property
    def warnings(self) -> list[StageResult]:
        return [r for r in self.results if r.failed and not r.fatal]

    @property
    def aborted(self) -> bool:
        return self.aborted_by is not None

    @property
    def all_tools_healthy(self) -> bool:
        verify = self.stage("verify")
        return bool(verify) and all(r.ok for r in verify)

    @property
    def exit_code(self) -> int:
        # Verifier failures are reported but never change the exit code
        return 1 if self.aborted else 0

    @property
    def status(self) -> str:
        if self.declined:
            return "declined"
        if self.aborted:
            return "failed"
        if not self.all_tools_healthy:
            return "degraded"
        return "ok"

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "status": self.status,
            "exit_code": self.exit_code,
            "all_tools_healthy": self.all_tools_healthy,
            "aborted_by": self.aborted_by,
            "abort_message": self.abort_message,
            "abort_hint": self.abort_hint,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "results": [r.model_dump(mode="json") for r in self.results],
        }
