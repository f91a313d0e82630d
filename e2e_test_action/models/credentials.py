"""Models for the identity used to authorize a submission."""

from typing import Final

from pydantic import Field, SecretStr

from e2e_test_action.models.base import Model

CI_SERVICE_ACCOUNT: Final = "travis"
TOKEN_REVOKED: Final = "~"


class Credentials(Model):
    """Username and token sent with a submission.

    A username equal to ``CI_SERVICE_ACCOUNT`` means no local identity was
    configured and the run is executing in CI.
    """

    username: str = Field(default=CI_SERVICE_ACCOUNT, description="Submitter login")
    token: SecretStr = Field(
        default=SecretStr(TOKEN_REVOKED), description="Submitter token or '~'"
    )

    @property
    def is_ci_service_account(self) -> bool:
        """Whether the username is still the CI service account placeholder."""
        return self.username == CI_SERVICE_ACCOUNT
