"""Errors raised by the GitHub membership oracle."""

from __future__ import annotations

from keyverify.services.verification.errors import VerificationError


class MembershipLookupError(VerificationError):
    """The membership lookup itself failed (transport, auth, rate limit, deadline)."""

    def __init__(self, message: str, *, status_code: int | None = None, detail: str = "") -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"{message}: {detail}" if detail else message)
