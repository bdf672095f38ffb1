"""Print the files a function needs at runtime."""

import asyncio

import click

from funcpack.commands.zip import load_functions_config
from funcpack.utils.error_handler import handle_exceptions


@click.command()
@handle_exceptions
@click.argument("src", type=click.Path(exists=True))
@click.option("--config", "config_path", default=None, type=click.Path(exists=True, dir_okay=False), help="Function config JSON file")
@click.option("--base-path", default=None, type=click.Path(exists=True, file_okay=False), help="Base path for included files")
def files(src, config_path, base_path):
    """List the resolved file set of the function at SRC, one path per line.

    Nothing is written. Useful to check what an archive would contain.

    Examples:
      funcpack files functions/hello.js
      funcpack files functions/api --config funcpack.json"""
    from funcpack.feature_flags import get_flags
    from funcpack.zip import list_function_files

    paths = asyncio.run(
        list_function_files(src, config=load_functions_config(config_path), feature_flags=get_flags(), base_path=base_path)
    )

    for path in paths:
        click.echo(path)
