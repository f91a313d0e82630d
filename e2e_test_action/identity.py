"""Resolve the identity used to authorize a submission."""

import json
import logging
from collections.abc import AsyncGenerator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final, Protocol, TypeAlias

from pydantic import ValidationError

from e2e_test_action.config import ActionConfig
from e2e_test_action.errors import ConfigError
from e2e_test_action.github import Commit, GitHubAPIError, GitHubClient, GitHubConfig
from e2e_test_action.models.credentials import Credentials

log = logging.getLogger(__name__)

CONFIG_FILE_NAME: Final = "config.json"
MERGE_BOT_LOGIN: Final = "web-flow"


class CommitLookup(Protocol):
    """Protocol for fetching commit metadata."""

    async def get_commit(self, owner: str, repo: str, sha: str) -> Commit:
        """Return metadata for the given commit."""


CommitLookupFactory: TypeAlias = Callable[
    [ActionConfig], AbstractAsyncContextManager[CommitLookup]
]


@asynccontextmanager
async def github_commit_lookup(
    config: ActionConfig,
) -> AsyncGenerator[CommitLookup, None]:
    """Open a GitHub client authenticated with the read-only CI token."""
    if config.github_token is None:
        raise ConfigError("RO_GH_TOKEN is required to look up the commit author")
    github_config = GitHubConfig(
        token=config.github_token, api_base_url=config.github_api_url
    )
    async with GitHubClient.from_config(github_config) as client:
        yield client


def load_local_config(path: Path) -> dict[str, Any]:
    """Read the local identity file, returning an empty record if unusable."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        log.info(
            "No usable %s (%s), assuming this is a CI run",
            path.name,
            type(exc).__name__,
        )
        return {}

    if not isinstance(data, dict):
        log.info("%s is not a JSON object, assuming this is a CI run", path)
        return {}
    return data


def select_login(commit: Commit) -> str:
    """Pick the human login responsible for a commit.

    Merge commits made through the GitHub UI are committed by the merge bot on
    behalf of the author, so the author wins in that case.
    """
    if commit.committer is None:
        raise ConfigError(
            f"Commit {commit.sha} has no committer linked to a GitHub account"
        )

    login = commit.committer.login
    if login == MERGE_BOT_LOGIN and commit.author is not None:
        login = commit.author.login
    return login


@dataclass(frozen=True, kw_only=True)
class IdentityResolver:
    """Determines the credentials used to authorize a submission."""

    config: ActionConfig
    commit_lookup_factory: CommitLookupFactory = github_commit_lookup

    @property
    def config_path(self) -> Path:
        """Location of the local identity file."""
        return self.config.tests_path / CONFIG_FILE_NAME

    async def resolve(self) -> Credentials:
        """Return usable credentials or raise ConfigError."""
        record = load_local_config(self.config_path)
        try:
            credentials = Credentials.model_validate(record)
        except ValidationError as exc:
            raise ConfigError(f"Invalid {self.config_path}: {exc}") from exc

        if not credentials.is_ci_service_account:
            log.info("Using local identity %s", credentials.username)
            return credentials

        log.info(
            "Your %s must contain a valid username and token to submit "
            "from outside CI",
            CONFIG_FILE_NAME,
        )
        username = await self.find_username()
        log.info("Resolved commit author: %s", username)
        return credentials.model_copy(update={"username": username})

    async def find_username(self) -> str:
        """Look up the login of whoever made the commit under test."""
        owner, repo, sha = self.commit_coordinates()

        async with self.commit_lookup_factory(self.config) as lookup:
            try:
                commit = await lookup.get_commit(owner, repo, sha)
            except GitHubAPIError as exc:
                raise ConfigError(f"Commit lookup failed: {exc}") from exc

        return select_login(commit)

    def commit_coordinates(self) -> tuple[str, str, str]:
        """Split the CI repository slug and pair it with the commit SHA."""
        slug = self.config.repo_slug
        sha = self.config.commit_sha
        if not slug or not sha:
            raise ConfigError(
                "TRAVIS_REPO_SLUG and TRAVIS_COMMIT are required when no local "
                "identity is configured"
            )

        owner, sep, repo = slug.partition("/")
        if not sep or not owner or not repo or "/" in repo:
            raise ConfigError(f"Malformed repository slug: {slug!r}")
        return owner, repo, sha
