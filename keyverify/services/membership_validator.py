"""Publisher identity check: is the user a public member of the organization."""

from __future__ import annotations

from typing import Protocol

from keyverify.core.logging import LoggerLike, get_logger
from keyverify.services.github.errors import MembershipLookupError
from keyverify.services.verification import Step, VerificationError

STEP_NAME = "Validate Github user"
MEMBERSHIP_VISIBILITY_DOCS_URL = (
    "https://docs.github.com/en/account-and-profile/setting-up-and-managing-your-personal-account-on-github/"
    "managing-your-membership-in-organizations/publicizing-or-hiding-organization-membership"
)
MEMBERSHIP_VISIBILITY_REMARK = (
    "If this is incorrect, please ensure that your organization membership is public. "
    "For more information, see [Github Docs - Publicizing or hiding organization membership]"
    f"({MEMBERSHIP_VISIBILITY_DOCS_URL})"
)


class MembershipOracle(Protocol):
    def is_user_in_organization(self, username: str, org: str) -> bool: ...


class UserLookupFailed(VerificationError):
    """The membership lookup errored; the cause is chained."""


class NotOrganizationMember(VerificationError):
    """The lookup succeeded and the user is not a public member."""


def membership_description(org_name: str) -> str:
    return f"User is a member of the organization {org_name}"


def verify_github_user(
    client: MembershipOracle,
    username: str,
    org_name: str,
    *,
    logger: LoggerLike | None = None,
) -> Step:
    """Build the membership step for ``username`` in ``org_name``."""
    log = logger or get_logger(__name__)
    step = Step(name=STEP_NAME)

    def _check() -> None:
        try:
            member = client.is_user_in_organization(username, org_name)
        except MembershipLookupError as exc:
            log.warning("verify.github.lookup_failed", extra={"error": str(exc)})
            raise UserLookupFailed(f"failed to get user: {exc}") from exc
        if not member:
            raise NotOrganizationMember("user is not a member of the organization")

    substep = step.run(membership_description(org_name), _check)
    if substep.failed:
        substep.add_remark(MEMBERSHIP_VISIBILITY_REMARK)
    log.info("verify.github.finished", extra={"status": step.status.value})
    return step
