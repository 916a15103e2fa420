import importlib.metadata
from dataclasses import dataclass
from typing import Literal

import click

from imagebuild.backend.client import BuildBackendClient, connect
from imagebuild.cli._configuration import (
    get_nested_value,
    load_config,
    load_local_config,
)

try:
    VERSION = importlib.metadata.version("imagebuild")
except importlib.metadata.PackageNotFoundError:
    VERSION = "unknown"


@dataclass
class Context:
    """Class for CLI context."""

    endpoint: str | None = None
    token: str | None = None
    version: str = VERSION
    debug: bool = False
    endpoint_source: Literal["cli", "local config", "global config"] | None = None

    def connect(self) -> BuildBackendClient:
        """Open the backend connection used by one command."""
        return connect(self.endpoint, self.token)

    @classmethod
    def _resolve_endpoint(
        cls, endpoint: str | None, local_config: dict, global_config: dict
    ) -> tuple[str | None, Literal["cli", "local config", "global config"] | None]:
        """Resolve the backend endpoint from CLI args or config, tracking its source."""
        if endpoint:
            return endpoint, "cli"
        local_endpoint = get_nested_value(local_config, "backend.endpoint")
        if local_endpoint:
            return str(local_endpoint), "local config"
        global_endpoint = get_nested_value(global_config, "backend.endpoint")
        if global_endpoint:
            return str(global_endpoint), "global config"
        return None, None

    @classmethod
    def _resolve_token(
        cls, token: str | None, local_config: dict, global_config: dict
    ) -> str | None:
        """Resolve the backend token from CLI args or config."""
        value = (
            token
            or get_nested_value(local_config, "backend.token")
            or get_nested_value(global_config, "backend.token")
        )
        return str(value) if value else None

    @classmethod
    def default(
        cls,
        endpoint: str | None = None,
        token: str | None = None,
        debug: bool = False,
    ) -> "Context":
        """Create a Context with values from CLI args, environment, saved config, or defaults."""
        local_config_data = load_local_config()
        global_config_data = load_config()

        final_endpoint, endpoint_source = cls._resolve_endpoint(
            endpoint, local_config_data, global_config_data
        )
        final_token = cls._resolve_token(token, local_config_data, global_config_data)

        return cls(
            endpoint=final_endpoint,
            token=final_token,
            debug=debug,
            endpoint_source=endpoint_source,
        )


"""Pass the Context object to the click command"""
pass_context = click.make_pass_decorator(Context)


class AliasedGroup(click.Group):
    """A command group that also accepts an unambiguous prefix of a command name.

    ``imagebuild b .`` runs ``build``.
    """

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        command = super().get_command(ctx, cmd_name)
        if command is not None:
            return command

        prefix = cmd_name.lower()
        candidates = sorted(
            name for name in self.list_commands(ctx) if name.lower().startswith(prefix)
        )
        if len(candidates) > 1:
            ctx.fail(f"Ambiguous command '{cmd_name}'. Could be: {', '.join(candidates)}")
        return super().get_command(ctx, candidates[0]) if candidates else None

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str, click.Command, list[str]]:
        # Report the full command name, never the prefix that was typed.
        _, command, args = super().resolve_command(ctx, args)
        return command.name, command, args
