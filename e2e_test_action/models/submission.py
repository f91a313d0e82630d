"""Models for submitting a bundle and tracking it on the server."""

import re
from pathlib import Path
from typing import Literal, TypeAlias

from pydantic import Field

from e2e_test_action.models.base import Model
from e2e_test_action.models.credentials import Credentials

CorrelationToken: TypeAlias = str
PollOutcome: TypeAlias = Literal["pending", "ready"]

TOKEN_PATTERN = re.compile(r"\d+")


def parse_correlation_token(body: str) -> CorrelationToken | None:
    """Return the token carried by a submission response, or None.

    The server answers with a decimal token on success and a human-readable
    message otherwise.
    """
    candidate = body.strip()
    if TOKEN_PATTERN.fullmatch(candidate):
        return candidate
    return None


class SubmissionRequest(Model):
    """Everything the server needs to run one bundle."""

    credentials: Credentials = Field(..., description="Submitter identity")
    archive_path: Path = Field(..., description="Local path of the test bundle")
    entry_point_dir: str = Field(..., description="Build output dir in the bundle")
    tests_dir: str = Field(..., description="Test suite dir in the bundle")
