"""Download and unpack the results of a finished test run."""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

import aiohttp
from pydantic import ValidationError

from e2e_test_action.capabilities import Capabilities
from e2e_test_action.errors import FetchError, ProcessError, ResultsParseError
from e2e_test_action.models.result import FetchedResults, ResultsManifest
from e2e_test_action.models.submission import CorrelationToken
from e2e_test_action.packager import remove_path

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class ResultFetcher:
    """Retrieves the manifest and result archive for a correlation token."""

    server: str
    work_dir: Path
    capabilities: Capabilities

    def manifest_url(self, token: CorrelationToken) -> str:
        """Server location of the manifest for ``token``."""
        return f"{self.server.rstrip('/')}/screenshots/output-{token}.json"

    def archive_url(self, manifest: ResultsManifest) -> str:
        """Server location of the archive named by ``manifest``."""
        return f"{self.server.rstrip('/')}/{manifest.output.lstrip('/')}"

    async def download(self, url: str) -> bytes:
        """GET ``url`` and return the body, raising FetchError on failure."""
        try:
            async with self.capabilities.session.get(url) as response:
                if response.status != 200:
                    text = await response.text(errors="replace")
                    raise FetchError(
                        f"Failed to download {url}: {response.status} {text}"
                    )
                return await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise FetchError(f"Failed to download {url}: {exc}") from exc

    async def get_manifest(self, token: CorrelationToken) -> ResultsManifest:
        """Download and parse the manifest for ``token``.

        Raises:
            FetchError: If the manifest cannot be downloaded
            ResultsParseError: If the manifest is not valid JSON of the
                expected shape

        """
        body = await self.download(self.manifest_url(token))
        log.info("Parsing results...")
        try:
            return ResultsManifest.model_validate_json(body)
        except ValidationError as exc:
            raise ResultsParseError(f"Malformed results manifest: {exc}") from exc

    async def fetch(self, token: CorrelationToken) -> FetchedResults:
        """Download the manifest and archive, and unpack the archive.

        The archive is unpacked into ``work_dir`` and left in place; call
        ``discard`` once it is no longer needed.
        """
        manifest = await self.get_manifest(token)

        archive_path = self.work_dir / manifest.archive_name
        archive_path.write_bytes(await self.download(self.archive_url(manifest)))
        log.info("Downloaded %s", archive_path.name)

        try:
            await self.capabilities.run_process(
                "tar", "-xf", archive_path.name, cwd=self.work_dir
            )
        except (ProcessError, OSError):
            remove_path(archive_path)
            raise
        return FetchedResults(manifest=manifest, archive_path=archive_path)

    def discard(self, results: FetchedResults) -> None:
        """Delete the downloaded archive."""
        remove_path(results.archive_path)
