"""Models for test run results published by the server."""

from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from pydantic import ConfigDict, Field

from e2e_test_action.models.base import Model


class ResultsManifest(Model):
    """Outcome of a completed test run.

    ``exit_code`` is 0 when every test passed. ``output`` is the server path of
    the result archive relative to the server root.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    exit_code: int = Field(..., alias="exitCode")
    output: str = Field(..., min_length=1)
    info: str = ""

    @property
    def archive_name(self) -> str:
        """File name of the result archive once downloaded."""
        return PurePosixPath(self.output).name


@dataclass(frozen=True, kw_only=True)
class FetchedResults:
    """Manifest plus the local copy of its archive."""

    manifest: ResultsManifest
    archive_path: Path
