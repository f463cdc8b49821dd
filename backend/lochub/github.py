"""
Authorization Gate: asks the GitHub REST API whether a caller can see a
repository before anything expensive (a clone) happens.

The check only exists to fail fast. A successful metadata query does not
guarantee the clone will succeed (private repositories can need different
scopes), so the fetcher authenticates again with the same credential.
"""

import enum
from typing import Optional

import httpx

from lochub.errors import (
    ForbiddenError,
    MalformedCredentialError,
    RepositoryNotFoundError,
    TransientError,
    UnauthenticatedError,
)
from lochub.logging import get_logger
from lochub.models import RepositoryIdentity

logger = get_logger("http")

GITHUB_API_VERSION = "2022-11-28"
USER_AGENT = "lochub"


class Outcome(enum.Enum):
    ALLOWED = "allowed"
    NOT_FOUND = "not_found"
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"


def classify_status(status: int) -> Outcome:
    # GitHub answers 404 both for missing repos and for repos the caller cannot see
    if status == 404:
        return Outcome.NOT_FOUND
    if status == 401:
        return Outcome.UNAUTHENTICATED
    if status == 403:
        return Outcome.FORBIDDEN
    return Outcome.ALLOWED


def raise_for_outcome(outcome: Outcome) -> None:
    """Turn a rejecting outcome into the matching access error."""
    if outcome is Outcome.NOT_FOUND:
        raise RepositoryNotFoundError()
    if outcome is Outcome.UNAUTHENTICATED:
        raise UnauthenticatedError()
    if outcome is Outcome.FORBIDDEN:
        raise ForbiddenError()


def parse_authorization(header: Optional[str]) -> Optional[str]:
    """Extract the bearer credential from an ``Authorization`` header value.

    Returns None when no header was sent. A header with a scheme but no token
    is rejected as unauthenticated.
    """
    if header is None:
        return None
    try:
        header.encode("ascii")
    except UnicodeEncodeError:
        raise MalformedCredentialError("Authorization header is not valid ASCII")
    parts = header.split(" ")
    if len(parts) < 2 or not parts[1]:
        raise UnauthenticatedError()
    return parts[1]


def gh_headers(credential: Optional[str] = None) -> dict:
    headers = {
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": GITHUB_API_VERSION,
        "User-Agent": USER_AGENT,
    }
    if credential:
        headers["Authorization"] = f"Bearer {credential}"
    return headers


class AuthorizationGate:
    def __init__(
        self,
        api_base: str = "https://api.github.com",
        timeout: float = 8.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def check(self, identity: RepositoryIdentity, credential: Optional[str] = None) -> Outcome:
        url = f"{self.api_base}/repos/{identity.owner}/{identity.name}"
        try:
            with httpx.Client(timeout=self.timeout, follow_redirects=True, transport=self.transport) as client:
                resp = client.get(url, headers=gh_headers(credential))
        except httpx.TimeoutException as e:
            raise TransientError("Timeout reaching GitHub API") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransientError(f"Error reaching GitHub API: {type(e).__name__}") from e

        outcome = classify_status(resp.status_code)
        logger.debug("metadata query for %s -> %s (%s)", identity.full_name, resp.status_code, outcome.value)
        return outcome
