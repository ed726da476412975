"""HTTP clients that produce the values gamecache stores.

Classes:
    :class:`SteamClient` -- async client for Steam app details, reviews,
    and generated review summaries, backed by :class:`httpx.AsyncClient`.
"""

from gamecache.client.steam import SteamClient

__all__ = ["SteamClient"]
