"""GitHub API access for organization membership checks."""

from keyverify.services.github.client import GithubClient
from keyverify.services.github.errors import MembershipLookupError

__all__ = ["GithubClient", "MembershipLookupError"]
