"""
HTTP access to nim-lang.org and the GitHub API.

Every failure (transport error, non-200 status, undecodable JSON) is
downgraded to an absent result and logged, so callers can treat it as
"this channel is unavailable" and move on to the next tier. No retries.
"""

import logging
import os
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlparse

import requests
from requests.exceptions import RequestException

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30

# Status codes that prove a download URL exists. GitHub release downloads
# answer HEAD with a 302 to the storage backend.
EXISTS_STATUS_CODES = (200, 302)

GITHUB_HOSTS = ("api.github.com", "github.com")


def github_token(environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """Return GITHUB_TOKEN or GITHUB_API_TOKEN, whichever is set first."""
    env = os.environ if environ is None else environ
    return env.get("GITHUB_TOKEN") or env.get("GITHUB_API_TOKEN") or None


def github_headers(token: Optional[str]) -> Dict[str, str]:
    """
    Build request headers for GitHub.

    Args:
        token: API token, or None for anonymous access

    Returns:
        Headers dict, with Authorization when a token is given
    """
    if token:
        return {"Authorization": f"token {token}"}
    return {}


class HttpClient:
    """
    Thin wrapper around a requests session.

    Example:
        >>> client = HttpClient(token=github_token())
        >>> client.url_exists("https://nim-lang.org/download/nim-2.2.4-linux_x64.tar.xz")
        True
    """

    def __init__(
        self,
        token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize client.

        Args:
            token: GitHub token, sent only to GitHub hosts
            timeout: Per-request timeout in seconds
            session: Optional preconfigured session
        """
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    def headers_for(self, url: str) -> Dict[str, str]:
        """Per-request headers; the token never leaves GitHub."""
        host = (urlparse(url).hostname or "").lower()
        if host in GITHUB_HOSTS:
            return github_headers(self.token)
        return {}

    def url_exists(self, url: str) -> bool:
        """
        Probe a URL with a HEAD request.

        Redirects are not followed; a 302 counts as existing.

        Returns:
            True if the server answered 200 or 302
        """
        try:
            response = self.session.head(
                url,
                headers=self.headers_for(url),
                timeout=self.timeout,
                allow_redirects=False,
            )
        except RequestException as e:
            logger.debug(f"HEAD {url} failed: {e}")
            return False

        logger.debug(f"HEAD {url} -> {response.status_code}")
        return response.status_code in EXISTS_STATUS_CODES

    def get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Optional[Any]:
        """
        GET a URL and decode its JSON body.

        Args:
            url: URL to fetch
            params: Optional query parameters

        Returns:
            Decoded JSON, or None on any failure
        """
        try:
            response = self.session.get(
                url, params=params, headers=self.headers_for(url), timeout=self.timeout
            )
        except RequestException as e:
            logger.warning(f"GET {url} failed: {e}")
            return None

        if response.status_code != 200:
            logger.warning(f"GET {url} returned HTTP {response.status_code}")
            return None

        try:
            return response.json()
        except ValueError as e:
            logger.warning(f"Invalid JSON from {url}: {e}")
            return None


__all__ = [
    "HttpClient",
    "github_token",
    "github_headers",
    "DEFAULT_TIMEOUT",
    "EXISTS_STATUS_CODES",
    "GITHUB_HOSTS",
]
