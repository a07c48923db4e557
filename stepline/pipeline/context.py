"""
Run state for a single pipeline execution.

PipelineRun holds:
- The input content
- The ordered (step, content) results captured so far
- The failure, if a step failed (index, step, message, error kind)
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from typing import Any

from stepline.models import Step
from stepline.models import StepResult


@dataclass
class PipelineRun:
    """
    Accumulator passed through a pipeline execution.

    Results are append-only. A failed run keeps every result recorded before
    the failing step; its `output` is None.
    """

    input: str
    results: list[StepResult] = field(default_factory=list)

    # Error state
    error: str | None = None
    error_kind: str | None = None
    failed_index: int | None = None
    failed_step: Step | None = None

    @property
    def current(self) -> str:
        """Content the next step should consume."""
        if self.results:
            return self.results[-1].content
        return self.input

    @property
    def output(self) -> str | None:
        """Final content, or None if the run failed or ran no steps."""
        if self.has_error() or not self.results:
            return None
        return self.results[-1].content

    @property
    def ok(self) -> bool:
        return not self.has_error()

    @property
    def warnings(self) -> list[str]:
        return [r.warning for r in self.results if r.warning]

    def record(self, step: Step, content: str, warning: str | None = None) -> None:
        """Append the result of a completed step."""
        self.results.append(StepResult(step=step, content=content, warning=warning))

    def set_error(
        self,
        message: str,
        kind: str | None = None,
        index: int | None = None,
        step: Step | None = None,
    ) -> None:
        """Mark the run as failed."""
        self.error = message
        self.error_kind = kind
        self.failed_index = index
        self.failed_step = step

    def has_error(self) -> bool:
        """Check if a step failed."""
        return self.error is not None

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON output."""
        result: dict[str, Any] = {
            "ok": self.ok,
            "results": [r.to_dict() for r in self.results],
        }
        if self.ok:
            result["output"] = self.output
        else:
            result["error"] = {
                "message": self.error,
                "kind": self.error_kind,
                "index": self.failed_index,
            }
            if self.failed_step is not None:
                result["error"]["step_id"] = self.failed_step.id
        return result
