"""Upload a test bundle to the server and obtain its correlation token."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Final
from urllib.parse import urlsplit

import aiohttp

from e2e_test_action.capabilities import Capabilities
from e2e_test_action.errors import SubmissionError
from e2e_test_action.models.submission import (
    CorrelationToken,
    SubmissionRequest,
    parse_correlation_token,
)

log = logging.getLogger(__name__)

LOOPBACK_HOSTS: Final = frozenset(["localhost", "127.0.0.1", "::1"])


def is_loopback(server: str) -> bool:
    """Whether ``server`` addresses the local host.

    Accepts both full URLs and bare ``host:port`` values.
    """
    if "://" not in server:
        server = f"//{server}"
    return urlsplit(server).hostname in LOOPBACK_HOSTS


@dataclass(frozen=True, kw_only=True)
class Submitter:
    """Sends bundles to the test server."""

    server: str
    capabilities: Capabilities

    def build_headers(self, request: SubmissionRequest) -> dict[str, str]:
        """Identity headers, plus a forwarded-for header for loopback servers."""
        headers = {
            "username": request.credentials.username,
            "token": request.credentials.token.get_secret_value(),
        }
        if is_loopback(self.server):
            # The server only authorizes requests that look external.
            headers["x-forwarded-for"] = "127.0.0.1"
        return headers

    async def submit(self, request: SubmissionRequest) -> CorrelationToken:
        """Upload the bundle and return the server-issued token.

        Raises:
            SubmissionError: If the upload fails or the server answers with
                anything other than a token

        """
        url = f"{self.server.rstrip('/')}/"
        log.info("Submitting bundle to %s for test...", url)

        try:
            with request.archive_path.open("rb") as tarball:
                form = aiohttp.FormData()
                form.add_field(
                    "tarball",
                    tarball,
                    filename=request.archive_path.name,
                    content_type="application/gzip",
                )
                form.add_field("entry-point", f"{request.entry_point_dir}/")
                form.add_field("tests-folder", request.tests_dir)

                async with self.capabilities.session.post(
                    url, data=form, headers=self.build_headers(request)
                ) as response:
                    body = await response.text(errors="replace")
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise SubmissionError(f"Failed to submit bundle: {exc}") from exc
        except OSError as exc:
            raise SubmissionError(f"Failed to read bundle: {exc}") from exc

        token = parse_correlation_token(body)
        if token is None:
            raise SubmissionError(f"The server responded with: {body.strip()}")

        log.info("Server response/token: %s", token)
        return token
