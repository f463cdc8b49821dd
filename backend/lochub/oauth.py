"""OAuth Exchange Coordinator: trades an authorization code for an access token."""

from typing import Dict, Optional
from urllib.parse import unquote_plus

import httpx

from lochub.errors import ExchangeRejectedError, MalformedResponseError, TransientError
from lochub.github import USER_AGENT
from lochub.logging import get_logger

logger = get_logger("auth")


def parse_token_response(body: str) -> Dict[str, str]:
    """Decode a ``key=value&key=value`` token response.

    Every pair must contain ``=`` and a non-empty key; a single malformed pair
    fails the whole parse. Empty values are kept (GitHub sends ``scope=``
    when no scopes were granted).
    """
    result: Dict[str, str] = {}
    for pair in body.split("&"):
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise MalformedResponseError()
        result[unquote_plus(key)] = unquote_plus(value)
    return result


class OAuthExchange:
    def __init__(
        self,
        client_id: str,
        client_secret: str,
        web_base: str = "https://github.com",
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.token_url = f"{web_base.rstrip('/')}/login/oauth/access_token"
        self.timeout = timeout
        self.transport = transport

    def exchange(self, code: str) -> Dict[str, str]:
        form = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
        }
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                resp = client.post(self.token_url, data=form, headers={"User-Agent": USER_AGENT})
        except httpx.HTTPError as e:
            raise TransientError(f"Error reaching GitHub token endpoint: {type(e).__name__}") from e

        if resp.status_code != 200:
            logger.warning("token exchange answered HTTP %s", resp.status_code)
            raise ExchangeRejectedError(str(resp.status_code))

        bundle = parse_token_response(resp.text)
        if "error" in bundle:
            logger.info("token exchange rejected: %s", bundle["error"])
            raise ExchangeRejectedError(bundle["error"])
        return bundle
