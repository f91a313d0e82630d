"""Read-only GitHub API client."""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

import aiohttp
from pydantic import ValidationError

from e2e_test_action.github.config import GitHubConfig
from e2e_test_action.github.models import Commit

log = logging.getLogger(__name__)


class GitHubAPIError(Exception):
    """Raised when a GitHub API call fails."""


@dataclass(frozen=True, kw_only=True)
class GitHubClient:
    """Minimal GitHub client for commit metadata lookups."""

    config: GitHubConfig
    session: aiohttp.ClientSession = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: GitHubConfig
    ) -> AsyncGenerator["GitHubClient", None]:
        """Create client with managed session lifecycle."""
        headers = {
            "Authorization": f"Bearer {config.token.get_secret_value()}",
            "Accept": "application/vnd.github+json",
        }
        async with aiohttp.ClientSession(
            base_url=config.api_base_url,
            headers=headers,
            timeout=aiohttp.ClientTimeout(total=config.timeout),
        ) as session:
            yield cls(config=config, session=session)

    async def get_commit(self, owner: str, repo: str, sha: str) -> Commit:
        """Fetch metadata for a single commit.

        Raises:
            GitHubAPIError: On transport failure, non-200 status or bad payload

        """
        url = f"/repos/{owner}/{repo}/commits/{sha}"
        log.info("Fetching commit %s from %s/%s", sha, owner, repo)

        try:
            async with self.session.get(url) as response:
                if response.status != 200:
                    text = await response.text(errors="replace")
                    raise GitHubAPIError(
                        f"Failed to get commit: {response.status} {text}"
                    )
                data = await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise GitHubAPIError(f"Failed to get commit: {exc}") from exc

        try:
            return Commit.model_validate(data)
        except ValidationError as exc:
            raise GitHubAPIError(f"Unexpected commit payload: {exc}") from exc
