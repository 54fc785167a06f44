"""Signing-key validation: a fixed pipeline of substeps over one parsed key."""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import datetime
from email.errors import HeaderParseError
from email.headerregistry import Address
from pathlib import Path
from typing import Protocol

from keyverify.core.logging import LoggerLike, get_logger
from keyverify.core.time import utcnow
from keyverify.services.files import read_key_file
from keyverify.services.gpg.errors import KeyLoadError, KeyParseError
from keyverify.services.gpg.models import SigningKey
from keyverify.services.verification import (
    SigningProvenanceUnverified,
    Status,
    Step,
    Substep,
    VerificationError,
)

STEP_NAME = "Validate GPG key"
PARSE_DESCRIPTION = "Key is a valid PGP key"
NOT_EXPIRED_DESCRIPTION = "Key is not expired"
NOT_REVOKED_DESCRIPTION = "Key is not revoked"
CAN_SIGN_DESCRIPTION = "Key can be used for signing"
IDENTITY_DESCRIPTION = "Key has a valid identity and email. (Email is preferable but optional)"
PROVENANCE_DESCRIPTION = "Key is used to sign the provider"

# Leading text, then the last bracketed section of the user id.
IDENTITY_EMAIL_RE = re.compile(r".*<(.*)>")

KeyLoader = Callable[[str | Path], bytes]
Clock = Callable[[], datetime]


class KeyParser(Protocol):
    def parse(self, data: bytes) -> SigningKey: ...


class IdentityValidationError(VerificationError):
    """One or more identities on the key are unusable.

    ``downgradable`` is true only when every problem is a missing or invalid
    email; a missing name is never downgradable.
    """

    def __init__(self, problems: list[str], *, downgradable: bool) -> None:
        self.problems = list(problems)
        self.downgradable = downgradable
        super().__init__("; ".join(self.problems))


def check_not_expired(key: SigningKey, now: datetime) -> None:
    if key.is_expired(now):
        expires_at = key.primary.expires_at
        if expires_at is not None and expires_at <= now:
            raise VerificationError(f"key is expired (expired at {expires_at.isoformat()})")
        raise VerificationError("key is expired")


def check_not_revoked(key: SigningKey) -> None:
    if key.is_revoked():
        raise VerificationError("key is revoked")


def check_can_sign(key: SigningKey, now: datetime) -> None:
    if not key.can_sign(now):
        raise VerificationError("key cannot be used for signing")


def _email_problem(user_id: str) -> str | None:
    match = IDENTITY_EMAIL_RE.search(user_id)
    if match is None:
        return f"key identity {user_id!r} has no email"
    try:
        # RFC 5322 addr-spec grammar; no deliverability or reserved-domain rules.
        Address(addr_spec=match.group(1))
    except (HeaderParseError, ValueError) as exc:
        return f"key identity {user_id!r} has an invalid email: {exc}"
    return None


def check_identities(key: SigningKey) -> None:
    """Every identity needs a name; an email in angle brackets is checked when present."""
    if not key.fingerprint:
        raise IdentityValidationError(["key has no fingerprint"], downgradable=False)
    if not key.identities:
        raise IdentityValidationError(["key has no identities"], downgradable=False)

    name_problems: list[str] = []
    email_problems: list[str] = []
    for position, identity in enumerate(key.identities, start=1):
        if not identity.name.strip():
            name_problems.append(f"key identity #{position} has no name")
            continue
        problem = _email_problem(identity.name)
        if problem is not None:
            email_problems.append(problem)

    if name_problems:
        raise IdentityValidationError(name_problems + email_problems, downgradable=False)
    if email_problems:
        raise IdentityValidationError(email_problems, downgradable=True)


def check_signing_provenance(key: SigningKey, org_name: str) -> None:
    # TODO: look up the organization's published provider releases and verify their signatures.
    owner = org_name or "the organization"
    raise SigningProvenanceUnverified(
        f"Not yet verified: no check that key {key.fingerprint or key.key_id} "
        f"signed the provider artifacts published by {owner}",
    )


def _downgrade_optional_failures(substep: Substep) -> None:
    if substep.failed and all(
        isinstance(error, IdentityValidationError) and error.downgradable
        for error in substep.errors
    ):
        substep.downgrade()


def verify_key_data(
    data: bytes,
    *,
    org_name: str,
    inspector: KeyParser,
    clock: Clock = utcnow,
    logger: LoggerLike | None = None,
    step: Step | None = None,
) -> Step:
    """Run the key pipeline over already loaded key bytes.

    ``org_name`` is carried for the signing-provenance extension point only;
    it does not influence the other checks.
    """
    log = logger or get_logger(__name__)
    step = step or Step(name=STEP_NAME)

    parsed: list[SigningKey] = []

    def _parse() -> None:
        try:
            parsed.append(inspector.parse(data))
        except KeyParseError as exc:
            raise KeyParseError(f"could not parse key: {exc}") from exc

    step.run(PARSE_DESCRIPTION, _parse)
    if not parsed:
        log.warning("verify.key.parse_failed")
        step.set_status(Status.FAILURE)
        return step

    key = parsed[0]
    now = clock()
    log.info("verify.key.parsed", extra={"fingerprint": key.fingerprint, "identities": len(key.identities)})

    step.run(NOT_EXPIRED_DESCRIPTION, lambda: check_not_expired(key, now))
    step.run(NOT_REVOKED_DESCRIPTION, lambda: check_not_revoked(key))
    step.run(CAN_SIGN_DESCRIPTION, lambda: check_can_sign(key, now))
    identity_substep = step.run(IDENTITY_DESCRIPTION, lambda: check_identities(key))
    provenance_substep = step.run(
        PROVENANCE_DESCRIPTION,
        lambda: check_signing_provenance(key, org_name),
    )

    _downgrade_optional_failures(identity_substep)
    provenance_substep.downgrade()

    log.info("verify.key.finished", extra={"status": step.status.value})
    return step


def verify_key(
    location: str | Path,
    *,
    org_name: str,
    inspector: KeyParser,
    load_key: KeyLoader = read_key_file,
    clock: Clock = utcnow,
    logger: LoggerLike | None = None,
) -> Step:
    """Load the key at ``location`` and validate it.

    An unreadable file fails the whole step before any substep runs.
    """
    log = logger or get_logger(__name__)
    step = Step(name=STEP_NAME)
    try:
        data = load_key(location)
    except KeyLoadError as exc:
        log.warning("verify.key.load_failed", extra={"location": str(location), "error": str(exc)})
        step.add_error(exc)
        step.set_status(Status.FAILURE)
        return step

    return verify_key_data(
        data,
        org_name=org_name,
        inspector=inspector,
        clock=clock,
        logger=log,
        step=step,
    )
