"""Redis client factory shared by the health checks and the worker."""

from __future__ import annotations

import ssl
from typing import Any

from redis import Redis


def create_redis_client(url: str, **kwargs: Any) -> Redis:
    """Create a Redis client, relaxing certificate checks for TLS URLs.

    Managed providers such as Upstash hand out ``redis://`` URLs that in
    fact require TLS; those are upgraded to ``rediss://``.
    """
    if ".upstash.io" in url and url.startswith("redis://"):
        url = url.replace("redis://", "rediss://", 1)

    client = Redis.from_url(url, **kwargs)

    if url.startswith("rediss://"):
        client.connection_pool.connection_kwargs["ssl_cert_reqs"] = ssl.CERT_NONE

    return client
