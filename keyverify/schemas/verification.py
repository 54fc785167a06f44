"""Schemas for the machine-readable verification report."""

from __future__ import annotations

from datetime import datetime

from sqlmodel import Field, SQLModel


class SubstepRead(SQLModel):
    """Serialized substep outcome."""

    description: str
    status: str
    remarks: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)


class StepRead(SQLModel):
    """Serialized step with its substeps in execution order."""

    name: str
    status: str
    remarks: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    substeps: list[SubstepRead] = Field(default_factory=list)


class VerificationReportRead(SQLModel):
    """Evidence payload written alongside the markdown report."""

    generated_at: datetime
    status: str
    failed: bool
    steps: list[StepRead] = Field(default_factory=list)
