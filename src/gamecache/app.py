"""Typer application and the ``gamecache`` console script.

The root :data:`app` registers three command groups:

``cache``
    Inspect and maintain the on-disk cache (list, show, delete, clear,
    sweep, stats).
``fetch``
    Read Steam details, reviews and summaries through the cache.
``config``
    View and edit ``config.json``.

:func:`main` is the installed entry point. Errors derived from
:class:`~gamecache.exceptions.GameCacheError` are printed as one line and
turned into their exit code; anything else leaves a traceback in a crash
log under :func:`~gamecache.config.get_data_dir`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import typer

from gamecache import __version__
from gamecache.commands.cache import cache_app
from gamecache.commands.config import config_app
from gamecache.commands.fetch import fetch_app
from gamecache.exceptions import ConfigError, GameCacheError
from gamecache.exit_codes import EXIT_GENERIC_FAILURE
from gamecache.output import OutputFormat, OutputManager, error, set_output

EXIT_INTERRUPTED = 130

app = typer.Typer(
    name="gamecache",
    help="Cache Steam game data on disk for 24 hours.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.add_typer(cache_app, name="cache", help="Inspect and maintain the on-disk cache.")
app.add_typer(fetch_app, name="fetch", help="Fetch Steam data through the cache.")
app.add_typer(config_app, name="config", help="View and edit the global configuration.")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"gamecache {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Print the version and exit.",
    ),
    cache_dir: Optional[str] = typer.Option(
        None,
        "--cache-dir",
        help="Cache root directory. Overrides GAMECACHE_CACHE_DIR and the config file.",
    ),
    json_output: bool = typer.Option(False, "--json", help="Write data to stdout as JSON."),
    plain_output: bool = typer.Option(
        False, "--plain", help="Write data as plain, tab-separated text."
    ),
    no_color: bool = typer.Option(False, "--no-color", help="Never use colour."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print data, warnings and errors."),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Trace cache hits, misses, writes and evictions."
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Do not ask for confirmation."),
) -> None:
    """Cache Steam game data on disk for 24 hours.

    Installs the process-wide output manager and stores ``cache_dir`` and
    ``force`` in ``ctx.obj`` for the sub-commands. Without ``--json`` or
    ``--plain`` the data format comes from ``output.format`` in the config.
    """
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        fmt = _configured_format()
    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    ctx.ensure_object(dict)
    ctx.obj.update(cache_dir=cache_dir, force=force)


def _configured_format() -> OutputFormat:
    from gamecache.config import load_global_config

    # An unreadable config is reported by the command that needs it.
    try:
        return OutputFormat(load_global_config().output.format)
    except ConfigError:
        return OutputFormat.AUTO


def _setup_signal_handlers() -> None:
    """Exit with status 130 on Ctrl-C instead of printing a traceback."""

    def _on_sigint(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nInterrupted.\n")
        sys.exit(EXIT_INTERRUPTED)

    signal.signal(signal.SIGINT, _on_sigint)


def _write_crash_log(exc: BaseException) -> Path:
    from gamecache.config import get_data_dir

    log_path = get_data_dir() / f"crash-{datetime.now():%Y%m%d-%H%M%S}.log"
    log_path.write_text("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))
    return log_path


def main() -> None:
    """Run the CLI and translate failures into exit codes.

    Raises:
        SystemExit: Always, either from Typer or from the error handling here.
    """
    _setup_signal_handlers()
    try:
        app()
    except KeyboardInterrupt:
        sys.stderr.write("\nInterrupted.\n")
        sys.exit(EXIT_INTERRUPTED)
    except GameCacheError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        log_path = _write_crash_log(exc)
        error(f"Unexpected error, traceback written to {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
