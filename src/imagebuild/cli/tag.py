import asyncio

import click

from imagebuild.cli._common import Context, pass_context
from imagebuild.cli._errors import handle_error
from imagebuild.exceptions import ImageBuildError
from imagebuild.tag import apply_tags


@click.command(short_help="Tag an image")
@click.argument("refs", nargs=-1, metavar="SOURCE_REF TARGET_REF [TARGET_REF, ...]")
@pass_context
def tag(ctx: Context, refs: tuple[str, ...]):
    """
    Create the tags TARGET_REF that refer to the image SOURCE_REF.
    """
    if len(refs) < 2:
        raise click.UsageError("at least two arguments are required")

    try:
        targets = asyncio.run(_tag(ctx, refs[0], list(refs[1:])))
    except ImageBuildError as e:
        handle_error(e, ctx)

    for target in targets:
        click.echo(f"Tagged {target}")


async def _tag(ctx: Context, source: str, targets: list[str]) -> list[str]:
    async with ctx.connect() as backend:
        return await apply_tags(backend, source, targets)
