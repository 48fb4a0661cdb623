"""Shared aiohttp session factory."""
import ssl

import aiohttp
import certifi


def client_session(timeout: float) -> aiohttp.ClientSession:
    """Return a session verifying TLS against the certifi bundle."""
    ssl_context = ssl.create_default_context(cafile=certifi.where())
    connector = aiohttp.TCPConnector(ssl=ssl_context)
    return aiohttp.ClientSession(
        connector=connector,
        timeout=aiohttp.ClientTimeout(total=timeout),
    )
