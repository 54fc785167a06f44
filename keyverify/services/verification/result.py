"""Ordered verification report with aggregate outcome and deterministic rendering."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime

from keyverify.core.time import utcnow
from keyverify.schemas.verification import (
    StepRead,
    SubstepRead,
    VerificationReportRead,
)
from keyverify.services.verification.status import Status, aggregate
from keyverify.services.verification.step import Step, Substep


def _indent_lines(text: str, prefix: str) -> list[str]:
    lines = str(text).splitlines() or [""]
    continuation = " " * len(prefix)
    return [f"{prefix}{lines[0]}", *(f"{continuation}{line}" for line in lines[1:])]


def _render_substep(substep: Substep) -> list[str]:
    lines = [f"- {substep.status.marker} {substep.description}"]
    for remark in substep.remarks:
        lines.extend(_indent_lines(remark, "  - "))
    if substep.status is Status.FAILURE:
        for error in substep.errors:
            lines.extend(_indent_lines(f"Error: {error}", "  - "))
    return lines


def _render_step(step: Step) -> list[str]:
    lines = [f"### {step.status.marker} {step.name}", ""]
    for error in step.errors:
        lines.extend(_indent_lines(f"Error: {error}", "- "))
    for remark in step.remarks:
        lines.extend(_indent_lines(remark, "- "))
    if step.errors or step.remarks:
        lines.append("")
    for substep in step.substeps:
        lines.extend(_render_substep(substep))
    if step.substeps:
        lines.append("")
    return lines


@dataclass(slots=True)
class Result:
    """All Steps of one verification run, in the order the driver appended them."""

    steps: list[Step] = field(default_factory=list)

    def append(self, step: Step) -> None:
        self.steps.append(step)

    def __iter__(self) -> Iterator[Step]:
        return iter(self.steps)

    @property
    def status(self) -> Status:
        return aggregate(step.status for step in self.steps)

    def did_fail(self) -> bool:
        """True iff the worst status across all steps is ``Failure``; warnings pass."""
        return self.status is Status.FAILURE

    def render_markdown(self) -> str:
        """Render the report as markdown; identical results render byte-identically."""
        lines: list[str] = []
        for step in self.steps:
            lines.extend(_render_step(step))
        while lines and lines[-1] == "":
            lines.pop()
        return "\n".join(lines) + "\n" if lines else ""

    def to_payload(self, *, generated_at: datetime | None = None) -> VerificationReportRead:
        """Build the machine-readable report payload."""
        return VerificationReportRead(
            generated_at=generated_at or utcnow(),
            status=self.status.value,
            failed=self.did_fail(),
            steps=[
                StepRead(
                    name=step.name,
                    status=step.status.value,
                    remarks=list(step.remarks),
                    errors=[str(error) for error in step.errors],
                    substeps=[
                        SubstepRead(
                            description=substep.description,
                            status=substep.status.value,
                            remarks=list(substep.remarks),
                            errors=[str(error) for error in substep.errors],
                        )
                        for substep in step.substeps
                    ],
                )
                for step in self.steps
            ],
        )
