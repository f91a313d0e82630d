"""Run the package, submit, poll, fetch and interpret stages in order."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from e2e_test_action.capabilities import Capabilities
from e2e_test_action.config import ActionConfig
from e2e_test_action.errors import ActionError, PipelineError
from e2e_test_action.fetcher import ResultFetcher
from e2e_test_action.identity import (
    CommitLookupFactory,
    IdentityResolver,
    github_commit_lookup,
)
from e2e_test_action.interpreter import interpret
from e2e_test_action.models.submission import CorrelationToken, SubmissionRequest
from e2e_test_action.packager import Packager
from e2e_test_action.poller import Poller
from e2e_test_action.submitter import Submitter

log = logging.getLogger(__name__)


@contextmanager
def pipeline_stage(name: str) -> Iterator[None]:
    """Re-raise any failure inside the block as a PipelineError for ``name``."""
    try:
        yield
    except (ActionError, OSError) as exc:
        raise PipelineError(name, exc) from exc


@dataclass(frozen=True, kw_only=True)
class Pipeline:
    """Drives one submission from bundle creation to exit code."""

    config: ActionConfig
    packager: Packager
    identity: IdentityResolver
    submitter: Submitter
    poller: Poller
    fetcher: ResultFetcher

    @classmethod
    def from_config(
        cls,
        config: ActionConfig,
        capabilities: Capabilities,
        commit_lookup_factory: CommitLookupFactory = github_commit_lookup,
    ) -> "Pipeline":
        """Wire every stage to the shared configuration and capabilities."""
        return cls(
            config=config,
            packager=Packager(config=config, capabilities=capabilities),
            identity=IdentityResolver(
                config=config, commit_lookup_factory=commit_lookup_factory
            ),
            submitter=Submitter(server=config.server, capabilities=capabilities),
            poller=Poller(server=config.server, capabilities=capabilities),
            fetcher=ResultFetcher(
                server=config.server,
                work_dir=config.work_dir,
                capabilities=capabilities,
            ),
        )

    async def submit(self) -> CorrelationToken:
        """Bundle the tests, resolve the identity and upload the bundle."""
        try:
            with pipeline_stage("package"):
                archive_path = await self.packager.create_tarball()

            with pipeline_stage("identity"):
                credentials = await self.identity.resolve()

            request = SubmissionRequest(
                credentials=credentials,
                archive_path=archive_path,
                entry_point_dir=self.config.build_output_dir,
                tests_dir=self.config.tests_dir,
            )
            with pipeline_stage("submit"):
                return await self.submitter.submit(request)
        finally:
            self.packager.cleanup()

    async def run(self) -> int:
        """Run every stage and return the process exit code.

        Raises:
            PipelineError: If any stage fails

        """
        token = await self.submit()

        with pipeline_stage("poll"):
            await self.poller.wait_for_ready(
                token,
                initial_delay=self.config.initial_sleep,
                poll_interval=self.config.poll_interval,
                timeout=self.config.timeout,
            )

        with pipeline_stage("fetch"):
            results = await self.fetcher.fetch(token)

        try:
            return interpret(results.manifest)
        finally:
            self.fetcher.discard(results)
