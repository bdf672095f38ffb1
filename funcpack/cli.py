"""funcpack CLI - Main entry point and command registration hub."""
# ruff: noqa: E402 - Intentional lazy loading: commands imported after cli group definition

import click

from funcpack import __version__


@click.group()
@click.version_option(version=__version__, prog_name="funcpack")
@click.help_option("-h", "--help")
def cli():
    """funcpack - Package Node.js serverless functions into deployable archives

    \b
    QUICK START:
      funcpack list functions              # What would be packaged
      funcpack files functions/hello.js    # Files one function needs
      funcpack zip functions --dest dist   # Write the archives

    \b
    For detailed options: funcpack <command> --help"""
    pass


from funcpack.commands.files import files
from funcpack.commands.list import list_command
from funcpack.commands.zip import zip_command

cli.add_command(zip_command)
cli.add_command(files)
cli.add_command(list_command)


def main():
    """Main entry point for console script."""
    cli()


if __name__ == "__main__":
    main()
