"""
GitHub REST API client.

Posts issue comments on behalf of the bot. Calls are not retried; the
caller decides what a failure means.
"""

import time
from typing import Optional

import httpx

from fxabot.config import Settings
from fxabot.utils.logging import get_logger, log_api_call

logger = get_logger(__name__)

USER_AGENT = "fxabot/0"


class GithubClientError(Exception):
    """Base class for failed GitHub API calls."""
    pass


class GithubAPIError(GithubClientError):
    """Raised when GitHub answers with an unexpected status code."""

    def __init__(self, message: str, *, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def unexpected_status(cls, action: str, status_code: int) -> "GithubAPIError":
        return cls(f"unexpected status code for {action}: {status_code}", status_code=status_code)


class GithubTransportError(GithubClientError):
    """Raised when the request never got a response."""
    pass


class GithubClient:
    """
    Thin async wrapper over the GitHub REST API.

    One instance is shared by every in-flight job; its configuration is
    fixed at construction.
    """

    def __init__(
        self,
        api: str,
        token: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            api: API base URL, e.g. https://api.github.com
            token: Bearer token sent with every request, if set
            timeout: Per-request timeout in seconds
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        headers = {
            "User-Agent": USER_AGENT,
            "Accept": "application/vnd.github+json",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._client = httpx.AsyncClient(
            base_url=api,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "GithubClient":
        return cls(
            settings.github_api,
            token=settings.github_token,
            timeout=settings.request_timeout_seconds,
        )

    async def github_comment(self, repo: str, issue: int, body: str) -> None:
        """
        Post a comment on an issue or pull request.

        Args:
            repo: Repository full name, e.g. "mozilla/fxa"
            issue: Issue or pull request number
            body: Markdown comment body

        Raises:
            GithubAPIError: If GitHub does not answer 201 Created
            GithubTransportError: If the request fails before a response
        """
        path = f"/repos/{repo}/issues/{issue}/comments"
        start = time.monotonic()

        try:
            response = await self._client.post(path, json={"body": body})
        except httpx.HTTPError as e:
            log_api_call(
                logger, "github", path, "POST",
                duration_ms=(time.monotonic() - start) * 1000,
                error=str(e) or type(e).__name__,
            )
            raise GithubTransportError(f"POST {path} failed: {e!r}") from e

        duration_ms = (time.monotonic() - start) * 1000
        if response.status_code != httpx.codes.CREATED:
            log_api_call(
                logger, "github", path, "POST",
                status_code=response.status_code,
                duration_ms=duration_ms,
                error=f"unexpected status code {response.status_code}",
            )
            raise GithubAPIError.unexpected_status("github comment", response.status_code)

        log_api_call(
            logger, "github", path, "POST",
            status_code=response.status_code,
            duration_ms=duration_ms,
        )

    async def close(self) -> None:
        await self._client.aclose()
