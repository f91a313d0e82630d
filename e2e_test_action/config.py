"""Run configuration assembled once from the environment and CLI arguments."""

from collections.abc import Mapping, Sequence
from pathlib import Path

from pydantic import Field, SecretStr, ValidationError

from e2e_test_action.errors import ConfigError
from e2e_test_action.models.base import Model

DEFAULT_SERVER = "http://localhost:3000"
DEFAULT_TIMEOUT = 1800
DEFAULT_GITHUB_API_URL = "https://api.github.com"

TESTS_DIR_VAR = "E2E_TESTS_DIR"
BUILD_OUTPUT_DIR_VAR = "BUILD_OUTPUT_DIR"
REPO_SLUG_VAR = "TRAVIS_REPO_SLUG"
COMMIT_SHA_VAR = "TRAVIS_COMMIT"
GITHUB_TOKEN_VAR = "RO_GH_TOKEN"
GITHUB_API_URL_VAR = "GITHUB_API_URL"


class ActionConfig(Model):
    """Settings shared by every pipeline stage."""

    tests_dir: str = Field(..., description="Test assets dir, relative to work_dir")
    build_output_dir: str = Field(..., description="Build output dir")
    work_dir: Path = Field(default_factory=Path.cwd)
    server: str = DEFAULT_SERVER
    is_app: bool = False
    initial_sleep: float = Field(default=10, ge=0)
    poll_interval: float = Field(default=3, ge=0)
    timeout: float | None = Field(
        default=DEFAULT_TIMEOUT,
        ge=0,
        description="Polling deadline in seconds (None waits forever)",
    )
    extras: Sequence[str] = ()
    repo_slug: str | None = None
    commit_sha: str | None = None
    github_token: SecretStr | None = None
    github_api_url: str = DEFAULT_GITHUB_API_URL

    @property
    def tests_path(self) -> Path:
        """Absolute location of the test assets directory."""
        return self.work_dir / self.tests_dir

    @property
    def server_url(self) -> str:
        """Server base URL without a trailing slash."""
        return self.server.rstrip("/")

    @classmethod
    def from_environ(
        cls, environ: Mapping[str, str], **overrides: object
    ) -> "ActionConfig":
        """Build the configuration from environment variables.

        Args:
            environ: Process environment (usually ``os.environ``)
            overrides: Values taken from the command line

        Raises:
            ConfigError: If a required variable is missing

        """
        missing = [
            name
            for name in (TESTS_DIR_VAR, BUILD_OUTPUT_DIR_VAR)
            if not environ.get(name)
        ]
        if missing:
            raise ConfigError(
                f"Missing required environment variable(s): {', '.join(missing)}"
            )

        token = environ.get(GITHUB_TOKEN_VAR)
        values: dict[str, object] = {
            "tests_dir": environ[TESTS_DIR_VAR],
            "build_output_dir": environ[BUILD_OUTPUT_DIR_VAR],
            "repo_slug": environ.get(REPO_SLUG_VAR) or None,
            "commit_sha": environ.get(COMMIT_SHA_VAR) or None,
            "github_token": SecretStr(token) if token else None,
            "github_api_url": environ.get(GITHUB_API_URL_VAR)
            or DEFAULT_GITHUB_API_URL,
        }
        values.update(overrides)
        try:
            return cls.model_validate(values)
        except ValidationError as exc:
            raise ConfigError(f"Invalid configuration: {exc}") from exc
