"""Public schema exports for report serialization."""

from keyverify.schemas.verification import StepRead, SubstepRead, VerificationReportRead

__all__ = ["StepRead", "SubstepRead", "VerificationReportRead"]
