"""Stage the end-to-end tests and bundle them for submission."""

import json
import logging
import shutil
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from e2e_test_action.capabilities import Capabilities
from e2e_test_action.config import ActionConfig

log = logging.getLogger(__name__)

TARBALL_NAME: Final = "test.tar.gz"
STAGING_DIR_NAME: Final = "tmp"
SUITE_SUFFIX: Final = "e2e.js"
JASMINE_CONFIG: Final = "jasmine.json"
SHARED_CONFIG: Final = "config.json"


def jasmine_config(spec_dir: str) -> str:
    """Render a jasmine.json that runs only the specs in ``spec_dir``."""
    return json.dumps({"spec_dir": spec_dir, "spec_files": ["*-spec.js"]}, indent=2)


def stage_tests(tests_path: Path) -> Sequence[str]:
    """Lay out one directory per suite under ``<tests_path>/tmp``.

    Every ``*e2e.js`` suite gets its own directory together with a copy of
    each shared helper script and a jasmine.json scoped to it. The identity
    file is copied once to the root of the staging tree.

    Returns:
        Names of the staged suite directories, sorted

    """
    staging = tests_path / STAGING_DIR_NAME
    if staging.exists():
        shutil.rmtree(staging)
    staging.mkdir(parents=True)

    files = sorted(p for p in tests_path.iterdir() if p.is_file())
    suites = [p.name[: -len(".js")] for p in files if p.name.endswith(SUITE_SUFFIX)]

    for name in suites:
        (staging / name).mkdir()
        shutil.copy2(tests_path / f"{name}.js", staging / name)

    for path in files:
        if path.name == JASMINE_CONFIG:
            for name in suites:
                (staging / name / JASMINE_CONFIG).write_text(
                    jasmine_config(name), encoding="utf-8"
                )
        elif path.suffix == ".js" and not path.name.endswith(SUITE_SUFFIX):
            for name in suites:
                shutil.copy2(path, staging / name)
        elif path.name == "test-config.json":
            for name in suites:
                shutil.copy2(path, staging / name)
        elif path.name == SHARED_CONFIG:
            shutil.copy2(path, staging / SHARED_CONFIG)

    log.info("Staged %d suite(s) in %s", len(suites), staging)
    return suites


def remove_path(path: Path) -> None:
    """Delete a file or tree, logging instead of raising on failure."""
    try:
        if path.is_dir():
            shutil.rmtree(path)
        else:
            path.unlink(missing_ok=True)
    except OSError as exc:
        log.warning("Failed to remove %s: %s", path, exc)


@dataclass(frozen=True, kw_only=True)
class Packager:
    """Builds the tarball submitted to the test server."""

    config: ActionConfig
    capabilities: Capabilities

    @property
    def tarball_path(self) -> Path:
        """Where the bundle is written."""
        return self.config.work_dir / TARBALL_NAME

    @property
    def staging_path(self) -> Path:
        """Where suites are staged before bundling."""
        return self.config.tests_path / STAGING_DIR_NAME

    async def create_tarball(self) -> Path:
        """Stage the suites and archive tests, build output and extras."""
        log.info("Packaging tests (is_app=%s)", self.config.is_app)
        stage_tests(self.config.tests_path)

        await self.capabilities.run_process(
            "tar",
            "--exclude=*.map",
            "-czf",
            TARBALL_NAME,
            self.config.tests_dir,
            self.config.build_output_dir,
            *self.config.extras,
            cwd=self.config.work_dir,
        )
        return self.tarball_path

    def cleanup(self) -> None:
        """Remove the bundle and the staging tree."""
        remove_path(self.tarball_path)
        remove_path(self.staging_path)
