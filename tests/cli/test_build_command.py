"""Tests for the build command"""

import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import AsyncMock, patch

from click.testing import CliRunner

import imagebuild.cli._configuration as config_module
from imagebuild.backend.models import SolveResponse
from imagebuild.cli import cli
from imagebuild.config import BuildConfiguration, ProgressMode
from imagebuild.exceptions import BackendConnectionError, SolveError

ENV = {"IMAGEBUILD_ENDPOINT": None, "IMAGEBUILD_TOKEN": None, "IMAGEBUILD_DEBUG": None}


class BuildCommandTestCase(unittest.TestCase):
    """Runs the CLI from an empty temporary directory without user config"""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.original_config_file = config_module.CONFIG_FILE
        self.original_local_config_file = config_module.LOCAL_CONFIG_FILE
        config_module.CONFIG_FILE = Path(self.tmpdir.name) / ".config" / "config.toml"
        config_module.LOCAL_CONFIG_FILE = (
            Path(self.tmpdir.name) / ".imagebuild" / "config.toml"
        )

        self.context_dir = Path(self.tmpdir.name) / "app"
        self.context_dir.mkdir()
        (self.context_dir / "Dockerfile").write_text("FROM alpine\n")

        self.original_cwd = os.getcwd()
        os.chdir(self.tmpdir.name)

    def tearDown(self):
        os.chdir(self.original_cwd)
        config_module.CONFIG_FILE = self.original_config_file
        config_module.LOCAL_CONFIG_FILE = self.original_local_config_file
        self.tmpdir.cleanup()

    def invoke(self, args):
        runner = CliRunner(env=ENV)
        return runner.invoke(cli, args, prog_name="imagebuild")


class TestBuildCommand(BuildCommandTestCase):
    """Test translating command line options into a build"""

    def test_build_passes_configuration(self):
        """Test that every option reaches the build configuration"""
        run_build = AsyncMock(return_value=SolveResponse())
        with patch("imagebuild.cli.build.run_build", run_build):
            result = self.invoke(
                [
                    "--endpoint",
                    "http://builder.test",
                    "build",
                    "--build-arg",
                    "VERSION=1.0",
                    "--label",
                    "team=build",
                    "--add-host",
                    "db:10.0.0.2",
                    "-t",
                    "app:dev",
                    "-t",
                    "bad ref",
                    "--target",
                    "final",
                    "--pull",
                    "--progress",
                    "plain",
                    "app",
                ]
            )

        self.assertEqual(result.exit_code, 0, result.output)
        run_build.assert_awaited_once()
        config = run_build.await_args.args[1]
        self.assertEqual(
            config,
            BuildConfiguration(
                context="app",
                target="final",
                build_args=("VERSION=1.0",),
                labels=("team=build",),
                add_hosts=("db:10.0.0.2",),
                tags=("app:dev", "bad ref"),
                pull=True,
                progress=ProgressMode.PLAIN,
            ),
        )

    def test_build_with_dockerfile(self):
        """Test that -f is passed as the Dockerfile path"""
        dockerfile = self.context_dir / "Containerfile"
        dockerfile.write_text("FROM alpine\n")
        run_build = AsyncMock(return_value=SolveResponse())
        with patch("imagebuild.cli.build.run_build", run_build):
            result = self.invoke(
                ["--endpoint", "http://builder.test", "build", "-f", str(dockerfile), "app"]
            )

        self.assertEqual(result.exit_code, 0, result.output)
        config = run_build.await_args.args[1]
        self.assertEqual(config.dockerfile, str(dockerfile))
        self.assertEqual(config.progress, ProgressMode.AUTO)

    def test_build_alias(self):
        """Test that the build command can be abbreviated"""
        run_build = AsyncMock(return_value=SolveResponse())
        with patch("imagebuild.cli.build.run_build", run_build):
            result = self.invoke(["--endpoint", "http://builder.test", "b", "app"])

        self.assertEqual(result.exit_code, 0, result.output)
        run_build.assert_awaited_once()

    def test_invalid_progress_mode(self):
        """Test that an unknown progress mode is a usage error"""
        result = self.invoke(
            ["--endpoint", "http://builder.test", "build", "--progress", "fancy", "app"]
        )
        self.assertEqual(result.exit_code, 2)

    def test_missing_context(self):
        """Test that the build context must exist"""
        result = self.invoke(["--endpoint", "http://builder.test", "build", "missing"])
        self.assertEqual(result.exit_code, 2)


class TestBuildCommandErrors(BuildCommandTestCase):
    """Test how build failures are reported"""

    def test_no_endpoint_configured(self):
        """Test that a missing endpoint shows the current configuration"""
        result = self.invoke(["build", "app"])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("no build backend configured", result.output)
        self.assertIn("Current configuration:", result.output)
        self.assertIn("Endpoint: not configured", result.output)

    def test_solve_error_message_unchanged(self):
        """Test that the backend diagnostic is shown as is"""
        run_build = AsyncMock(
            side_effect=SolveError('process "/bin/sh -c make" did not complete successfully')
        )
        with patch("imagebuild.cli.build.run_build", run_build):
            result = self.invoke(["--endpoint", "http://builder.test", "build", "app"])

        self.assertEqual(result.exit_code, 1)
        self.assertIn(
            'Error: process "/bin/sh -c make" did not complete successfully', result.output
        )
        self.assertNotIn("Stack trace:", result.output)

    def test_connection_error_shows_config(self):
        """Test that connection errors show where the endpoint came from"""
        run_build = AsyncMock(side_effect=BackendConnectionError("connection refused"))
        with patch("imagebuild.cli.build.run_build", run_build):
            result = self.invoke(
                ["--endpoint", "http://builder.test", "--token", "t", "build", "app"]
            )

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Endpoint: http://builder.test (from cli)", result.output)
        self.assertIn("Auth: Token", result.output)
        self.assertIn("Error: connection refused", result.output)

    def test_debug_shows_stack_trace(self):
        """Test that --debug prints the stack trace"""
        run_build = AsyncMock(side_effect=SolveError("boom"))
        with patch("imagebuild.cli.build.run_build", run_build):
            result = self.invoke(
                ["--debug", "--endpoint", "http://builder.test", "build", "app"]
            )

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Stack trace:", result.output)
        self.assertIn("Error: boom", result.output)

    def test_file_system_error(self):
        """Test that local file errors are reported without a traceback"""
        run_build = AsyncMock(side_effect=PermissionError("permission denied: app/secret"))
        with patch("imagebuild.cli.build.run_build", run_build):
            result = self.invoke(["--endpoint", "http://builder.test", "build", "app"])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("File system error while preparing build request", result.output)
        self.assertIn("--debug", result.output)


if __name__ == "__main__":
    unittest.main()
