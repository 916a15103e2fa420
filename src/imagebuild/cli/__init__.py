import click

from imagebuild.utils.logging import configure_cli_logging, configure_logging_early

from . import _common, build, tag


@click.group(cls=_common.AliasedGroup)
@click.version_option(
    version=_common.VERSION, package_name="imagebuild", prog_name="imagebuild"
)
@click.option(
    "--debug",
    is_flag=True,
    envvar="IMAGEBUILD_DEBUG",
    help="Show debug logs, detailed error information and stack traces",
)
@click.option(
    "--endpoint",
    envvar="IMAGEBUILD_ENDPOINT",
    help="URL of the build backend",
)
@click.option(
    "--token",
    envvar="IMAGEBUILD_TOKEN",
    help="Token used to authenticate with the build backend",
)
@click.pass_context
def cli(
    ctx: click.Context,
    debug: bool,
    endpoint: str | None,
    token: str | None,
):
    """
    Build container images on a remote build backend.
    """
    configure_cli_logging(debug=debug)
    ctx.obj = _common.Context.default(endpoint=endpoint, token=token, debug=debug)


cli.add_command(build.build)
cli.add_command(tag.tag)


def main():
    configure_logging_early()
    cli()
