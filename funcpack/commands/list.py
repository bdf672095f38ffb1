"""List the functions found in functions directories."""

import click

from funcpack.utils.error_handler import handle_exceptions


@click.command("list")
@handle_exceptions
@click.argument("src", nargs=-1, required=True, type=click.Path(exists=True, file_okay=False))
def list_command(src):
    """Show every function discovered in the SRC directories."""
    from funcpack.pipeline.ui import console, plain_table, print_warning
    from funcpack.zip import list_functions

    functions = list_functions(list(src))
    if not functions:
        print_warning("No functions found")
        return

    table = plain_table("Name", "Main file", "Kind")

    for function in functions:
        kind = "directory" if function.is_directory else function.extension.lstrip(".")
        table.add_row(function.name, function.main_file, kind)

    console.print(table)
