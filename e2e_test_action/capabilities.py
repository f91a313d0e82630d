"""Process execution and HTTP capabilities shared by the pipeline stages."""

import asyncio
import logging
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, TypeAlias

import aiohttp

from e2e_test_action.errors import ProcessError

log = logging.getLogger(__name__)

SleepFn: TypeAlias = Callable[[float], Awaitable[None]]


@dataclass(frozen=True, kw_only=True)
class ProcessResult:
    """Outcome of an external command."""

    returncode: int
    stdout: str
    stderr: str


class ProcessRunner(Protocol):
    """Protocol for running an external command."""

    def __call__(self, *args: str, cwd: Path) -> Awaitable[ProcessResult]:
        """Run the command in ``cwd`` and return its result."""


async def run_process(*args: str, cwd: Path) -> ProcessResult:
    """Run a command and raise ProcessError if it exits with a nonzero status."""
    log.info("Running command: %s", " ".join(args))
    process = await asyncio.create_subprocess_exec(
        *args,
        cwd=cwd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await process.communicate()

    result = ProcessResult(
        returncode=process.returncode if process.returncode is not None else -1,
        stdout=stdout.decode(),
        stderr=stderr.decode(),
    )
    if result.returncode != 0:
        raise ProcessError(
            f"{args[0]} exited with status {result.returncode}: "
            f"{result.stderr.strip()}"
        )
    return result


@dataclass(frozen=True, kw_only=True)
class Capabilities:
    """Collaborators injected into every stage.

    Tests replace any of these with fakes.
    """

    session: aiohttp.ClientSession = field(repr=False)
    run_process: ProcessRunner = run_process
    sleep: SleepFn = asyncio.sleep

    @classmethod
    @asynccontextmanager
    async def open(cls) -> AsyncGenerator["Capabilities", None]:
        """Create capabilities with a managed HTTP session."""
        async with aiohttp.ClientSession() as session:
            yield cls(session=session)
