"""
Main CLI for explore-me using Click.

Commands:
    index            build (or skip) the index of the source root
    search           filter the records and print them as JSON
    show             print the record stored at a given id
    exts / tags      print the dictionaries of the last build
    validate-config  check a YAML configuration file
"""

import json
import sys
from pathlib import Path
from typing import Any, Callable

import click
import structlog
import yaml
from pydantic import ValidationError

from . import __version__
from .config import AppConfig, TagPatternError, load_config
from .indexer import RecordDecodeError, build_index
from .logging import HumanLog, configure_logging
from .search import (
    UNLIMITED,
    RecordNotFoundError,
    SearchFilter,
    get_record,
    load_extensions,
    load_tags,
    search,
)

# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILED = 1
EXIT_CONFIG_ERROR = 3
EXIT_NOT_FOUND = 4

logger = structlog.get_logger()


def _common_options(func: Callable) -> Callable:
    """Options shared by every command that loads the configuration."""
    func = click.option(
        "--log-file",
        type=click.Path(dir_okay=False, path_type=Path),
        help="Write a JSON log of the run to this file",
    )(func)
    func = click.option(
        "--quiet",
        is_flag=True,
        default=False,
        help="Only print results and errors",
    )(func)
    func = click.option(
        "-v",
        "--verbose",
        count=True,
        help="Technical logs on stderr (-v info, -vv debug)",
    )(func)
    func = click.option(
        "-c",
        "--config",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="Path to the YAML configuration file",
    )(func)
    return func


def _setup(config_path: Path | None, quiet: bool, cli_args: dict[str, Any]) -> AppConfig:
    """Load the configuration and configure logging, exiting on bad config."""
    try:
        app_config = load_config(config_path=config_path, cli_args=cli_args)
    except FileNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)
    except ValidationError as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)
    except (yaml.YAMLError, ValueError) as e:
        click.echo(f"Invalid configuration file: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)

    configure_logging(app_config.logging, quiet=quiet)
    return app_config


def _echo_json(value: Any) -> None:
    click.echo(json.dumps(value, ensure_ascii=False, indent=2))


@click.group()
@click.version_option(version=__version__, prog_name="explore-me")
def main() -> None:
    """explore-me: index filenames and tags, search them fast."""


@main.command()
@click.option("--src", type=click.Path(file_okay=False, path_type=Path), help="Directory tree to index")
@click.option("--data", type=click.Path(file_okay=False, path_type=Path), help="Directory for the index files")
@_common_options
def index(
    src: Path | None,
    data: Path | None,
    config: Path | None,
    verbose: int,
    quiet: bool,
    log_file: Path | None,
) -> None:
    """Build the index, unless the source root is unchanged."""
    app_config = _setup(
        config, quiet,
        {"src": src, "data": data, "verbose": verbose, "log_file": log_file},
    )
    hlog = HumanLog(logger)

    try:
        result = build_index(app_config)
    except TagPatternError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)
    except OSError as e:
        logger.error("index.build.failed", error=str(e))
        click.echo(f"Error: index build failed: {e}", err=True)
        sys.exit(EXIT_FAILED)

    if result.rebuilt:
        hlog.build_complete(
            src=str(app_config.src_root),
            data=str(app_config.data_root),
            files=result.files,
            extensions=result.extensions,
            tags=result.tags,
            duration_ms=result.build_time_ms,
        )
    else:
        hlog.build_skipped(src=str(app_config.src_root))


@main.command("search")
@click.option("--name", default="", help="Substring of the file name")
@click.option("--path", "path_", default="", help="Substring of the relative path")
@click.option("--ext", default="", help="Exact extension (lower case, no dot)")
@click.option("--tag", default="", help="Exact tag")
@click.option(
    "-n",
    "--limit",
    type=click.IntRange(min=UNLIMITED),
    default=None,
    help="Maximum results (-1 = all). Default: search.default_limit",
)
@_common_options
def search_cmd(
    name: str,
    path_: str,
    ext: str,
    tag: str,
    limit: int | None,
    config: Path | None,
    verbose: int,
    quiet: bool,
    log_file: Path | None,
) -> None:
    """Print the records matching every given criterion as JSON."""
    app_config = _setup(config, quiet, {"verbose": verbose, "log_file": log_file})
    if limit is None:
        limit = app_config.search.default_limit

    search_filter = SearchFilter(name=name, path=path_, ext=ext, tag=tag)
    try:
        results = search(app_config.index_path, search_filter, limit)
    except FileNotFoundError:
        click.echo(
            f"Error: index not found at {app_config.index_path} (run 'explore-me index' first)",
            err=True,
        )
        sys.exit(EXIT_NOT_FOUND)
    except (OSError, RecordDecodeError) as e:
        logger.error("search.failed", error=str(e))
        click.echo(f"Error: search failed: {e}", err=True)
        sys.exit(EXIT_FAILED)

    HumanLog(logger).search_complete(results=len(results))
    _echo_json([r.to_dict() for r in results])


@main.command()
@click.argument("record_id", type=click.IntRange(min=0))
@_common_options
def show(
    record_id: int,
    config: Path | None,
    verbose: int,
    quiet: bool,
    log_file: Path | None,
) -> None:
    """Print the record whose id (byte offset) is RECORD_ID."""
    app_config = _setup(config, quiet, {"verbose": verbose, "log_file": log_file})
    try:
        result = get_record(app_config.index_path, record_id)
    except (FileNotFoundError, RecordNotFoundError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_NOT_FOUND)
    except RecordDecodeError as e:
        click.echo(f"Error: id {record_id} does not start a record ({e})", err=True)
        sys.exit(EXIT_FAILED)
    except OSError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_FAILED)

    _echo_json(result.to_dict())


def _dictionary_command(loader: Callable, what: str) -> Callable:
    """Build a command that prints one of the build dictionaries."""

    @_common_options
    def command(config: Path | None, verbose: int, quiet: bool, log_file: Path | None) -> None:
        app_config = _setup(config, quiet, {"verbose": verbose, "log_file": log_file})
        try:
            values = loader(app_config.data_root, app_config.scan)
        except FileNotFoundError:
            click.echo(f"Error: no {what} dictionary in {app_config.data_root}", err=True)
            sys.exit(EXIT_NOT_FOUND)
        except (OSError, ValueError) as e:
            click.echo(f"Error: cannot read the {what} dictionary: {e}", err=True)
            sys.exit(EXIT_FAILED)
        _echo_json(values)

    command.__doc__ = f"List the {what}s seen in the last build."
    return command


main.command("exts")(_dictionary_command(load_extensions, "extension"))
main.command("tags")(_dictionary_command(load_tags, "tag"))


@main.command("validate-config")
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="Path to the configuration file to validate",
)
def validate_config(config: Path) -> None:
    """Validate a YAML configuration file."""
    try:
        app_config = load_config(config_path=config)
    except ValidationError as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)
    except (yaml.YAMLError, ValueError) as e:
        click.echo(f"Invalid configuration file: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)
    except Exception as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        sys.exit(EXIT_FAILED)

    click.echo("Valid configuration")
    click.echo(f"  Source root: {app_config.src_root}")
    click.echo(f"  Data root: {app_config.data_root}")
    click.echo(f"  Tag pattern: {app_config.scan.tag_pattern}")
    click.echo(f"  Ignored names: {len(app_config.scan.ignore_names)}")
    click.echo(f"  Ignored extensions: {len(app_config.scan.ignore_exts)}")


if __name__ == "__main__":
    main()
