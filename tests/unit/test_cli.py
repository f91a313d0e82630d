"""Tests for CLI module."""

import logging
from pathlib import Path
from unittest.mock import AsyncMock, Mock, patch

import pytest

from e2e_test_action.cli import build_parser, load_config, main, run
from e2e_test_action.config import DEFAULT_TIMEOUT, ActionConfig
from e2e_test_action.errors import PipelineError, SubmissionError

ENVIRON = {"E2E_TESTS_DIR": "tests/e2e", "BUILD_OUTPUT_DIR": "dist"}


class TestBuildParser:
    """Tests for build_parser."""

    def test_defaults(self) -> None:
        """Defaults match the server conventions."""
        args = build_parser().parse_args([])

        assert args.app is False
        assert args.server == "http://localhost:3000"
        assert args.initial_sleep == 10
        assert args.poll_interval == 3
        assert args.timeout == DEFAULT_TIMEOUT
        assert args.extras == []

    def test_parses_flags_and_extras(self) -> None:
        """Trailing positionals are extra bundle members."""
        args = build_parser().parse_args(
            [
                "--app",
                "--server",
                "http://e2e.example.com",
                "--initial-sleep",
                "5",
                "--poll-interval",
                "1.5",
                "package.json",
                "assets",
            ]
        )

        assert args.app is True
        assert args.server == "http://e2e.example.com"
        assert args.initial_sleep == 5
        assert args.poll_interval == 1.5
        assert args.extras == ["package.json", "assets"]


class TestLoadConfig:
    """Tests for load_config."""

    def test_combines_arguments_and_environment(self, tmp_path: Path) -> None:
        """Arguments and environment end up in one configuration."""
        args = build_parser().parse_args(
            ["--work-dir", str(tmp_path), "--timeout", "60", "extra.txt"]
        )

        config = load_config(args, ENVIRON)

        assert config.work_dir == tmp_path
        assert config.timeout == 60
        assert config.extras == ("extra.txt",)
        assert config.tests_dir == "tests/e2e"

    def test_zero_timeout_disables_deadline(self) -> None:
        """--timeout 0 polls until the server answers."""
        args = build_parser().parse_args(["--timeout", "0"])

        assert load_config(args, ENVIRON).timeout is None


class TestRun:
    """Tests for run function."""

    @pytest.fixture
    def mock_capabilities(self) -> Mock:
        """Patch Capabilities.open to yield a mock without opening a session."""
        cm = AsyncMock()
        cm.__aenter__.return_value = Mock()
        cm.__aexit__.return_value = None
        return cm

    async def test_returns_pipeline_exit_code(
        self, config: ActionConfig, mock_capabilities: AsyncMock
    ) -> None:
        """Returns whatever the pipeline decides."""
        with (
            patch(
                "e2e_test_action.cli.Capabilities.open",
                return_value=mock_capabilities,
            ),
            patch("e2e_test_action.cli.Pipeline.from_config") as mock_from_config,
        ):
            mock_from_config.return_value.run = AsyncMock(return_value=0)

            exit_code = await run(config)

        assert exit_code == 0

    async def test_returns_one_on_pipeline_error(
        self,
        config: ActionConfig,
        mock_capabilities: AsyncMock,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Stage failures are logged and exit with 1."""
        error = PipelineError("submit", SubmissionError("Invalid token"))

        with (
            patch(
                "e2e_test_action.cli.Capabilities.open",
                return_value=mock_capabilities,
            ),
            patch("e2e_test_action.cli.Pipeline.from_config") as mock_from_config,
            caplog.at_level(logging.ERROR),
        ):
            mock_from_config.return_value.run = AsyncMock(side_effect=error)

            exit_code = await run(config)

        assert exit_code == 1
        assert "Pipeline aborted during submit: Invalid token" in caplog.text

    async def test_leaves_is_app_logging_to_packager(
        self,
        config: ActionConfig,
        mock_capabilities: AsyncMock,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """The app flag is reported by the packaging stage only."""
        with (
            patch(
                "e2e_test_action.cli.Capabilities.open",
                return_value=mock_capabilities,
            ),
            patch("e2e_test_action.cli.Pipeline.from_config") as mock_from_config,
            caplog.at_level(logging.INFO),
        ):
            mock_from_config.return_value.run = AsyncMock(return_value=0)

            await run(config)

        assert "is_app" not in caplog.text
        assert "isApp" not in caplog.text


class TestMain:
    """Tests for main function."""

    def test_exits_one_without_required_environment(self) -> None:
        """Missing environment variables exit with status 1."""
        with (
            patch.dict("os.environ", {}, clear=True),
            pytest.raises(SystemExit) as exc_info,
        ):
            main([])

        assert exc_info.value.code == 1

    def test_exits_with_run_result(self, tmp_path: Path) -> None:
        """The pipeline exit code becomes the process exit code."""
        with (
            patch.dict("os.environ", ENVIRON, clear=True),
            patch("e2e_test_action.cli.run", new_callable=AsyncMock, return_value=0),
            pytest.raises(SystemExit) as exc_info,
        ):
            main(["--work-dir", str(tmp_path)])

        assert exc_info.value.code == 0
