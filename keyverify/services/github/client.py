"""GitHub REST client used as the organization-membership oracle."""

from __future__ import annotations

from urllib.parse import quote

import httpx

from keyverify.core.logging import LoggerLike, get_logger
from keyverify.core.time import Deadline, DeadlineExceeded
from keyverify.services.github.errors import MembershipLookupError

DEFAULT_API_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text.strip()[:200]
    if isinstance(payload, dict):
        message = payload.get("message")
        if isinstance(message, str):
            return message
    return ""


class GithubClient:
    """Minimal synchronous GitHub API client.

    Every request takes its timeout from the run ``Deadline``. Calls are made
    once; failures surface as ``MembershipLookupError`` and are never retried.
    """

    def __init__(
        self,
        *,
        token: str,
        base_url: str = DEFAULT_API_URL,
        deadline: Deadline | None = None,
        logger: LoggerLike | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._token = token.strip()
        self._deadline = deadline
        self._logger = logger or get_logger(__name__)
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
            "User-Agent": "provider-key-verifier",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _timeout(self, operation: str) -> float | None:
        if self._deadline is None:
            return None
        return self._deadline.timeout_for(operation)

    def is_user_in_organization(self, username: str, org: str) -> bool:
        """Return whether ``username`` is a public member of ``org``."""
        username = username.strip()
        org = org.strip()
        if not username or not org:
            raise MembershipLookupError("username and organization must both be provided")

        path = f"/orgs/{quote(org, safe='')}/public_members/{quote(username, safe='')}"
        try:
            timeout = self._timeout("membership lookup")
            with httpx.Client(
                base_url=self.base_url,
                timeout=timeout,
                headers=self._headers(),
                transport=self._transport,
            ) as client:
                response = client.get(path)
        except DeadlineExceeded as exc:
            raise MembershipLookupError(str(exc)) from exc
        except httpx.TimeoutException as exc:
            raise MembershipLookupError(f"request to GitHub timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            raise MembershipLookupError(f"request to GitHub failed: {exc}") from exc

        self._logger.debug(
            "verify.github.membership_response",
            extra={"status_code": response.status_code, "path": path},
        )
        if response.status_code == httpx.codes.NO_CONTENT:
            return True
        if response.status_code == httpx.codes.NOT_FOUND:
            return False
        raise MembershipLookupError(
            f"unexpected GitHub response {response.status_code}",
            status_code=response.status_code,
            detail=_error_message(response),
        )
