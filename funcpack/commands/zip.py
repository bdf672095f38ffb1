"""Package every function of one or more functions directories."""

import asyncio
import json

import click

from funcpack.utils.error_handler import handle_exceptions
from funcpack.utils.exit_codes import ExitCodes


def parse_flag_options(values: tuple[str, ...]) -> dict[str, bool]:
    """Turn repeated `--flag NAME=BOOL` options into a mapping."""
    from funcpack.feature_flags import FeatureFlags, parse_flag_value

    flags = {}
    for value in values:
        name, sep, raw = value.partition("=")
        name = name.strip().replace("-", "_")
        if not sep:
            raise click.BadParameter(f"expected NAME=BOOL, got {value!r}", param_hint="--flag")
        if name not in FeatureFlags.names():
            raise click.BadParameter(
                f"unknown flag {name!r} (known: {', '.join(FeatureFlags.names())})", param_hint="--flag"
            )
        try:
            flags[name] = parse_flag_value(raw)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--flag") from e
    return flags


def load_functions_config(path: str | None) -> dict | None:
    """Read a JSON file mapping function-name globs to function config."""
    if path is None:
        return None

    from funcpack.utils.helpers import load_json_file

    data = load_json_file(path)
    if not isinstance(data, dict) or not all(isinstance(block, dict) for block in data.values()):
        raise click.BadParameter("expected an object of glob -> config objects", param_hint="--config")
    return data


@click.command("zip")
@handle_exceptions
@click.argument("src", nargs=-1, required=True, type=click.Path(exists=True, file_okay=False))
@click.option("--dest", required=True, type=click.Path(file_okay=False), help="Output directory")
@click.option(
    "--format",
    "archive_format",
    default=None,
    type=click.Choice(["zip", "none"]),
    help="zip archives, or plain directories with 'none'",
)
@click.option("--parallel-limit", default=None, type=int, help="Functions packaged at the same time")
@click.option("--config", "config_path", default=None, type=click.Path(exists=True, dir_okay=False), help="Function config JSON file")
@click.option("--base-path", default=None, type=click.Path(exists=True, file_okay=False), help="Common root of archive entries")
@click.option("--flag", "flag_values", multiple=True, help="Feature flag override, NAME=BOOL (repeatable)")
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
@click.option("--log-dir", default=None, type=click.Path(file_okay=False), help="Also write a rotating log file there")
@click.pass_context
def zip_command(ctx, src, dest, archive_format, parallel_limit, config_path, base_path, flag_values, as_json, log_dir):
    """Package functions into deployable archives.

    Every entry of each SRC directory is a function: a .js/.cjs/.mjs file,
    a directory holding <name>.js or index.js, or a prebuilt .zip. Each one
    is written to DEST together with the files it needs at runtime.

    Examples:
      funcpack zip functions --dest dist
      funcpack zip functions --dest dist --format none
      funcpack zip functions --dest dist --flag unique_entry_file=1

    Exit codes:
      0  every function was packaged
      1  at least one function failed
      3  no function was found"""
    from funcpack.config_runtime import load_runtime_config
    from funcpack.feature_flags import get_flags
    from funcpack.pipeline.ui import console, print_error, print_header, print_summary, print_warning, results_table
    from funcpack.zip import zip_functions

    if log_dir is not None:
        from pathlib import Path

        from funcpack.utils.logging import configure_file_logging

        configure_file_logging(Path(log_dir))

    runtime_config = load_runtime_config()
    results = asyncio.run(
        zip_functions(
            list(src),
            dest,
            archive_format=archive_format or runtime_config["archive"]["format"],
            config=load_functions_config(config_path),
            feature_flags=get_flags(parse_flag_options(flag_values)),
            parallel_limit=parallel_limit,
            base_path=base_path,
            runtime_config=runtime_config,
        )
    )

    if not results:
        print_warning(f"No functions found in {', '.join(src)}")
        ctx.exit(ExitCodes.NO_FUNCTIONS)

    failed = [result for result in results if not result.ok]

    if as_json:
        click.echo(json.dumps([result.to_dict() for result in results], indent=2))
    else:
        print_header("PACKAGED FUNCTIONS")
        console.print(results_table(results))

        for result in results:
            if result.native_modules:
                print_warning(f"{result.name} uses native modules: {', '.join(result.native_modules)}")
            if result.unresolved_imports:
                print_warning(f"{result.name} has dynamic imports that were not followed: {len(result.unresolved_imports)}")
        for result in failed:
            print_error(f"{result.name}: {result.error}")

        print_summary(results, dest)

    if failed:
        ctx.exit(ExitCodes.FUNCTION_FAILED)
