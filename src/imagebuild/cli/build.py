import asyncio

import click

from imagebuild.build import run_build
from imagebuild.cli._common import Context, pass_context
from imagebuild.cli._errors import handle_error
from imagebuild.config import BuildConfiguration, ProgressMode
from imagebuild.exceptions import ImageBuildError


@click.command(short_help="Build an image from a Dockerfile")
@click.option(
    "--add-host",
    "add_hosts",
    multiple=True,
    metavar="HOST:IP",
    help="Add a custom host-to-IP mapping (host:ip)",
)
@click.option(
    "--build-arg",
    "build_args",
    multiple=True,
    metavar="KEY=VALUE",
    help="Set build-time variables",
)
@click.option(
    "-f",
    "--file",
    "dockerfile",
    type=click.Path(exists=True, dir_okay=False),
    help="Name of the Dockerfile (Default is 'PATH/Dockerfile')",
)
@click.option(
    "--label",
    "labels",
    multiple=True,
    metavar="KEY=VALUE",
    help="Set metadata for an image",
)
@click.option(
    "--progress",
    type=click.Choice([mode.value for mode in ProgressMode], case_sensitive=False),
    default=ProgressMode.AUTO.value,
    show_default=True,
    help="Set type of progress output (auto, plain, tty, none). Use plain to show container output",
)
@click.option(
    "-t",
    "--tag",
    "tags",
    multiple=True,
    metavar="NAME[:TAG]",
    help="Name and optionally a tag in the 'name:tag' format",
)
@click.option("--target", default="", help="Set the target build stage to build.")
@click.option(
    "--pull",
    is_flag=True,
    default=False,
    help="Always attempt to pull a newer version of the image",
)
@click.argument("path", type=click.Path(exists=True, file_okay=False))
@pass_context
def build(
    ctx: Context,
    add_hosts: tuple[str, ...],
    build_args: tuple[str, ...],
    dockerfile: str | None,
    labels: tuple[str, ...],
    progress: str,
    tags: tuple[str, ...],
    target: str,
    pull: bool,
    path: str,
):
    """
    Build an image from the build context at PATH.
    """
    config = BuildConfiguration.from_options(
        context=path,
        dockerfile=dockerfile,
        target=target,
        build_args=build_args,
        labels=labels,
        add_hosts=add_hosts,
        tags=tags,
        pull=pull,
        progress=progress.lower(),
    )

    try:
        asyncio.run(_build(ctx, config))
    except (ImageBuildError, OSError) as e:
        handle_error(e, ctx)


async def _build(ctx: Context, config: BuildConfiguration) -> None:
    async with ctx.connect() as backend:
        await run_build(backend, config)
