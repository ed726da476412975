"""Built-in CLI sub-commands for gamecache.

This package groups the Typer sub-command modules registered on the root
app in :mod:`gamecache.app`:

* :mod:`~gamecache.commands.cache` -- list, show, delete, sweep, clear,
  and inspect cached entries.
* :mod:`~gamecache.commands.config` -- view and modify global settings.
* :mod:`~gamecache.commands.fetch` -- read Steam data through the cache.

Each module exports a :class:`typer.Typer` sub-application.
"""
