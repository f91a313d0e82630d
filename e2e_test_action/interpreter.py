"""Turn a results manifest into a process exit code."""

import logging

from e2e_test_action.models.result import ResultsManifest

log = logging.getLogger(__name__)


def interpret(manifest: ResultsManifest) -> int:
    """Log the run summary and return 0 if every test passed, else 1."""
    if manifest.info:
        log.info("%s", manifest.info)

    log.info("-" * 70)
    log.info("Screenshots directory updated with results from server.")

    if manifest.exit_code == 0:
        log.info("Tests Pass.")
        return 0

    log.error("Tests FAILED (server exit code %d)", manifest.exit_code)
    return 1
