"""Error taxonomy for reportable verification outcomes."""

from __future__ import annotations


class VerificationError(Exception):
    """An expected check failure.

    ``Step.run`` records these as substep failures. Any other exception raised
    by a check is treated as a defect and propagates to the caller.
    """


class SigningProvenanceUnverified(VerificationError):
    """Raised by the signing-provenance check, which has no implementation yet."""
