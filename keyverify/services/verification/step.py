"""Named checks made of ordered, independently executed substeps."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from keyverify.services.verification.errors import VerificationError
from keyverify.services.verification.status import Status, aggregate

Check = Callable[[], None]


@dataclass(slots=True)
class Substep:
    """One atomic assertion inside a Step.

    ``status`` is written once, from ``Unknown`` to ``Success`` or ``Failure``,
    by the owning Step when the check runs. The only later transition is
    ``downgrade()`` (``Failure -> Warning``).
    """

    description: str
    status: Status = Status.UNKNOWN
    remarks: list[str] = field(default_factory=list)
    errors: list[BaseException] = field(default_factory=list)

    def _settle(self, status: Status, error: BaseException | None = None) -> None:
        if self.status is not Status.UNKNOWN:
            msg = f"substep {self.description!r} already settled as {self.status}"
            raise RuntimeError(msg)
        if status not in (Status.SUCCESS, Status.FAILURE):
            msg = f"substep can only settle as success or failure, got {status}"
            raise RuntimeError(msg)
        self.status = status
        if error is not None:
            self.errors.append(error)

    def add_remark(self, remark: str) -> Substep:
        self.remarks.append(remark)
        return self

    def downgrade(self) -> Substep:
        """Turn a ``Failure`` into a ``Warning``; any other status is left alone.

        Postcondition: the substep holds no errors. Their messages are kept as
        remarks so the reason for the warning is still reported.
        """
        if self.status is Status.FAILURE:
            self.status = Status.WARNING
            self.remarks.extend(str(error) for error in self.errors)
            self.errors.clear()
        return self

    @property
    def failed(self) -> bool:
        return self.status is Status.FAILURE


@dataclass(slots=True)
class Step:
    """A named group of substeps plus step-level remarks and errors."""

    name: str
    substeps: list[Substep] = field(default_factory=list)
    remarks: list[str] = field(default_factory=list)
    errors: list[BaseException] = field(default_factory=list)
    _status_override: Status | None = None

    def run(self, description: str, check: Check) -> Substep:
        """Execute ``check`` once and record its outcome as a new substep.

        A ``VerificationError`` marks the substep ``Failure`` and is captured.
        Other exceptions propagate unchanged.
        """
        substep = Substep(description=description)
        self.substeps.append(substep)
        try:
            check()
        except VerificationError as exc:
            substep._settle(Status.FAILURE, exc)
        else:
            substep._settle(Status.SUCCESS)
        return substep

    def add_error(self, error: BaseException) -> None:
        """Record a step-level error, e.g. input that could not be read at all."""
        self.errors.append(error)

    def add_remark(self, remark: str) -> None:
        self.remarks.append(remark)

    def set_status(self, status: Status) -> None:
        """Override the derived status when a precondition short-circuits the step."""
        self._status_override = status

    @property
    def status(self) -> Status:
        if self._status_override is not None:
            return self._status_override
        return aggregate(substep.status for substep in self.substeps)

    @property
    def failed(self) -> bool:
        return self.status is Status.FAILURE
