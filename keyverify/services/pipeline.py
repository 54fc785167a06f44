"""Compose the key and membership validators into one verification result."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from keyverify.core.logging import LoggerLike
from keyverify.core.time import utcnow
from keyverify.services.files import read_key_file
from keyverify.services.key_validator import Clock, KeyLoader, KeyParser, verify_key
from keyverify.services.membership_validator import MembershipOracle, verify_github_user
from keyverify.services.verification import Result


@dataclass(frozen=True, slots=True)
class VerificationRequest:
    """Inputs for a single verification run."""

    key_file: str | Path
    username: str
    org_name: str


def run_verification(
    request: VerificationRequest,
    *,
    inspector: KeyParser,
    github_client: MembershipOracle,
    logger: LoggerLike,
    load_key: KeyLoader = read_key_file,
    clock: Clock = utcnow,
) -> Result:
    """Run every validator once, in order, and collect their steps."""
    result = Result()
    logger.info("verify.run.started", extra={"location": str(request.key_file)})

    result.append(
        verify_key(
            request.key_file,
            org_name=request.org_name,
            inspector=inspector,
            load_key=load_key,
            clock=clock,
            logger=logger,
        ),
    )
    result.append(
        verify_github_user(
            github_client,
            request.username,
            request.org_name,
            logger=logger,
        ),
    )

    logger.info(
        "verify.run.finished",
        extra={"status": result.status.value, "failed": result.did_fail()},
    )
    return result
