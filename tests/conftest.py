"""Shared fixtures."""

from collections.abc import AsyncGenerator, Generator
from pathlib import Path
from unittest.mock import AsyncMock

import aiohttp
import pytest
from aioresponses import aioresponses as aioresponses_cls
from pydantic import SecretStr

from e2e_test_action.capabilities import Capabilities, ProcessResult
from e2e_test_action.config import ActionConfig

SERVER = "http://test-server:3000"


@pytest.fixture
def aioresponses() -> Generator[aioresponses_cls, None, None]:
    """Intercept every aiohttp request made during the test."""
    with aioresponses_cls() as mocked:
        yield mocked


@pytest.fixture
async def session() -> AsyncGenerator[aiohttp.ClientSession, None]:
    """Plain HTTP session."""
    async with aiohttp.ClientSession() as session:
        yield session


@pytest.fixture
def sleep() -> AsyncMock:
    """Sleep that returns immediately and records its calls."""
    return AsyncMock(return_value=None)


@pytest.fixture
def run_process() -> AsyncMock:
    """Process runner that always succeeds without running anything."""
    return AsyncMock(return_value=ProcessResult(returncode=0, stdout="", stderr=""))


@pytest.fixture
def capabilities(
    session: aiohttp.ClientSession, sleep: AsyncMock, run_process: AsyncMock
) -> Capabilities:
    """Capabilities backed by fakes for sleeping and process execution."""
    return Capabilities(session=session, sleep=sleep, run_process=run_process)


@pytest.fixture
def config(tmp_path: Path) -> ActionConfig:
    """Configuration rooted in a temporary project directory."""
    (tmp_path / "tests" / "e2e").mkdir(parents=True)
    (tmp_path / "dist").mkdir()
    return ActionConfig(
        tests_dir="tests/e2e",
        build_output_dir="dist",
        work_dir=tmp_path,
        server=SERVER,
        repo_slug="test-owner/test-repo",
        commit_sha="abc123def456",
        github_token=SecretStr("ro-token"),
    )
