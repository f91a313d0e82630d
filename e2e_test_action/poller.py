"""Wait for the server to finish running a submitted bundle."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Final

import aiohttp

from e2e_test_action.capabilities import Capabilities
from e2e_test_action.config import DEFAULT_TIMEOUT
from e2e_test_action.errors import PollError, PollTimeoutError
from e2e_test_action.models.submission import CorrelationToken, PollOutcome

log = logging.getLogger(__name__)

PENDING_SENTINEL: Final = "not found"


def classify_status(body: str) -> PollOutcome:
    """Map a status response body to a poll outcome."""
    if body.strip().lower() == PENDING_SENTINEL:
        return "pending"
    return "ready"


@dataclass(frozen=True, kw_only=True)
class Poller:
    """Polls the server status endpoint for a correlation token."""

    server: str
    capabilities: Capabilities

    async def check_status(self, token: CorrelationToken) -> PollOutcome:
        """Query the status endpoint once.

        Raises:
            PollError: On transport failure

        """
        url = f"{self.server.rstrip('/')}/status/{token}"
        log.info("Checking for results...")
        try:
            async with self.capabilities.session.get(url) as response:
                body = await response.text(errors="replace")
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise PollError(f"Status check for {token} failed: {exc}") from exc
        return classify_status(body)

    async def wait_for_ready(
        self,
        token: CorrelationToken,
        initial_delay: float = 10,
        poll_interval: float = 3,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> None:
        """Block until the server reports results for ``token``.

        Args:
            token: Correlation token returned on submission
            initial_delay: Seconds to wait before the first check
            poll_interval: Seconds between checks while pending
            timeout: Maximum seconds to keep polling after the first check,
                or None to poll until the server answers

        Raises:
            PollError: If a status check fails at the transport level
            PollTimeoutError: If results are not ready within ``timeout``

        """
        log.info("Waiting %ss before checking", initial_delay)
        await self.capabilities.sleep(initial_delay)

        loop = asyncio.get_running_loop()
        deadline = None if timeout is None else loop.time() + timeout

        while await self.check_status(token) == "pending":
            if deadline is not None and loop.time() >= deadline:
                raise PollTimeoutError(
                    f"Results for {token} were not ready within {timeout} seconds"
                )
            await self.capabilities.sleep(poll_interval)

        log.info("Results for %s are ready", token)
