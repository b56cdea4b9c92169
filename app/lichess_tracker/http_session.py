import os

import aiohttp

_session: aiohttp.ClientSession | None = None

# Seconds; unset means a request may wait indefinitely.
HTTP_TIMEOUT = os.getenv("LICHESS_HTTP_TIMEOUT")


def get_session() -> aiohttp.ClientSession:
    global _session
    if _session and not _session.closed:
        return _session
    total = float(HTTP_TIMEOUT) if HTTP_TIMEOUT else None
    timeout = aiohttp.ClientTimeout(total=total)
    connector = aiohttp.TCPConnector(limit=10, ttl_dns_cache=300)
    _session = aiohttp.ClientSession(timeout=timeout, connector=connector)
    return _session


async def close_session():
    global _session
    if _session and not _session.closed:
        await _session.close()
        _session = None
