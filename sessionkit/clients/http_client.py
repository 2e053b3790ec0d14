from __future__ import annotations

import httpx

from sessionkit.config import Settings

USER_AGENT = "sessionkit-client/1.0"


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    # No transport-level retries: a failed refresh must surface, never be replayed.
    transport = httpx.AsyncHTTPTransport(retries=0, verify=settings.VERIFY_SSL)
    return httpx.AsyncClient(
        base_url=settings.API_BASE_URL,
        transport=transport,
        timeout=httpx.Timeout(settings.REQUEST_TIMEOUT),
        headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
    )


async def close_http_client(client: httpx.AsyncClient) -> None:
    await client.aclose()
