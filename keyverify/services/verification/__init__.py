"""Step/substep verification engine and report rendering."""

from keyverify.services.verification.errors import SigningProvenanceUnverified, VerificationError
from keyverify.services.verification.result import Result
from keyverify.services.verification.status import Status, aggregate, worse
from keyverify.services.verification.step import Step, Substep

__all__ = [
    "Result",
    "SigningProvenanceUnverified",
    "Status",
    "Step",
    "Substep",
    "VerificationError",
    "aggregate",
    "worse",
]
