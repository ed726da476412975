"""Output rendering and diagnostics for gamecache.

Two streams, two jobs:

* **stdout** carries data only: cached payloads, key listings, sweep and
  stats reports. It stays machine-readable when piped.
* **stderr** carries diagnostics: status lines, warnings, errors, and the
  ``--verbose`` trace of cache hits, misses, writes and discarded entries.

Rich styling is used only when stdout is a terminal and colour has not been
turned off through ``NO_COLOR``, ``TERM=dumb`` or ``--no-color``.

The cache layer never receives a manager explicitly. It calls the
module-level :func:`debug` and :func:`warning`, which route through the
instance installed by :func:`set_output`. When nothing was installed (the
cache used as a library) a default, non-verbose manager is created on first
use, so debug traces stay silent.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional, Sequence

from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """How data written to stdout is rendered.

    ``AUTO`` becomes ``RICH`` on a colour-capable terminal and ``PLAIN``
    everywhere else.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


# level -> (plain prefix, rich markup template)
_DIAGNOSTIC_STYLES: dict[str, tuple[str, str]] = {
    "info": ("", "{message}"),
    "success": ("", "[green]{message}[/green]"),
    "warning": ("Warning: ", "[yellow]Warning:[/yellow] {message}"),
    "error": ("Error: ", "[bold red]Error:[/bold red] {message}"),
    "debug": ("[debug] ", "[dim]\\[debug] {message}[/dim]"),
}


class OutputManager:
    """Renders data to stdout and diagnostics to stderr.

    Args:
        format: Rendering for stdout data; ``AUTO`` is resolved at
            construction time.
        no_color: Never emit colour or Rich markup.
        quiet: Drop ``info`` and ``success`` messages. Warnings and errors
            are always shown.
        verbose: Show ``debug`` messages (cache hits, misses, evictions).
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        self._format = _resolve_format(format, self._no_color)

        rich_data = self._format == OutputFormat.RICH
        self._data_console = Console(
            file=sys.stdout, no_color=self._no_color, force_terminal=rich_data
        )
        self._diag_console = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    # ------------------------------------------------------------------ #
    # stdout
    # ------------------------------------------------------------------ #

    def format_response(self, data: Any) -> None:
        """Render one JSON-compatible value (dict, list, or scalar) to stdout."""
        if self._format == OutputFormat.JSON:
            self.print_data(_to_json(data, indent=2))
        elif self._format == OutputFormat.PLAIN:
            for line in _plain_lines(data):
                self.print_data(line)
        elif isinstance(data, (dict, list)):
            syntax = Syntax(_to_json(data, indent=2), "json", theme="monokai", word_wrap=True)
            self._data_console.print(syntax)
        else:
            self._data_console.print(str(data))

    def print_data(self, text: str) -> None:
        """Write *text* plus a newline to stdout, unstyled."""
        print(text, file=sys.stdout, flush=True)

    def print_table(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[Any]],
        title: Optional[str] = None,
    ) -> None:
        """Render rows as a Rich table, a JSON array of objects, or TSV.

        Cells are converted with ``str()``; in JSON mode each row becomes an
        object keyed by *headers*.
        """
        cells = [[str(cell) for cell in row] for row in rows]
        if self._format == OutputFormat.JSON:
            self.print_data(_to_json([dict(zip(headers, row)) for row in cells], indent=2))
            return
        if self._format == OutputFormat.PLAIN:
            for row in [list(headers), *cells]:
                self.print_data("\t".join(row))
            return

        table = Table(title=title, header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        for row in cells:
            table.add_row(*row)
        self._data_console.print(table)

    # ------------------------------------------------------------------ #
    # stderr
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic("info", message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic("success", message)

    def warning(self, message: str) -> None:
        self._diagnostic("warning", message)

    def error(self, message: str) -> None:
        self._diagnostic("error", message)

    def debug(self, message: str) -> None:
        if self._verbose:
            self._diagnostic("debug", message)

    def _diagnostic(self, level: str, message: str) -> None:
        prefix, markup = _DIAGNOSTIC_STYLES[level]
        if self._no_color:
            print(f"{prefix}{message}", file=sys.stderr, flush=True)
        else:
            self._diag_console.print(markup.format(message=message))


# ------------------------------------------------------------------ #
# Rendering helpers
# ------------------------------------------------------------------ #


def _to_json(data: Any, indent: Optional[int] = None) -> str:
    return json.dumps(data, indent=indent, ensure_ascii=False, default=str)


def _plain_lines(data: Any) -> list[str]:
    """Flatten *data* for pipes: ``key<TAB>value`` for dicts, one item per line for lists."""

    def cell(value: Any) -> str:
        return _to_json(value) if isinstance(value, (dict, list)) else str(value)

    if isinstance(data, dict):
        return [f"{key}\t{cell(value)}" for key, value in data.items()]
    if isinstance(data, list):
        return [cell(item) for item in data]
    return [str(data)]


def _resolve_format(requested: OutputFormat, no_color: bool) -> OutputFormat:
    if requested != OutputFormat.AUTO:
        return requested
    return OutputFormat.RICH if _is_tty() and not no_color else OutputFormat.PLAIN


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """Return True when ``NO_COLOR`` is set (any value, even empty) or ``TERM=dumb``."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Process-wide manager
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    """Install *output* for all module-level helpers. Called by the CLI root callback."""
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager so the next call builds a fresh default.

    The test suite calls this between tests, since a manager keeps the
    stdout/stderr objects that were current when it was built.
    """
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def print_table(
    headers: Sequence[str],
    rows: Sequence[Sequence[Any]],
    title: Optional[str] = None,
) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    """Report a recoverable problem, e.g. a cache write that failed. Shown even with ``--quiet``."""
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    """Trace a cache decision. Printed only when the manager is verbose."""
    get_output().debug(message)
