"""Shared HTTP helpers for the upstream clients.

Every service goes through ``get_json`` so transport, status and decoding
failures surface as the same error types.
"""

import logging
from typing import Any, Optional

import httpx

from app.exceptions import FetchFailed, NetworkError, ParseError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S: float = 30.0


async def http_get(
    url: str,
    params: Optional[dict] = None,
    headers: Optional[dict] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> httpx.Response:
    """GET *url*, reusing *client* when one is supplied."""
    if client is not None:
        return await client.get(
            url, params=params, headers=headers, timeout=DEFAULT_TIMEOUT_S,
            follow_redirects=True,
        )

    async with httpx.AsyncClient() as session:
        return await session.get(
            url, params=params, headers=headers, timeout=DEFAULT_TIMEOUT_S,
            follow_redirects=True,
        )


async def get_json(
    url: str,
    params: Optional[dict] = None,
    headers: Optional[dict] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> Any:
    """GET *url* and decode the JSON body.

    Raises:
        FetchFailed: If the response status is not 2xx.
        NetworkError: If the request could not be completed.
        ParseError: If the body is not valid JSON.
    """
    try:
        response = await http_get(url, params=params, headers=headers, client=client)
    except httpx.HTTPError as e:
        raise NetworkError(f"Request to {url} failed: {e}") from e

    if not response.is_success:
        raise FetchFailed(url, response.status_code, response.reason_phrase)

    try:
        return response.json()
    except ValueError as e:
        raise ParseError(f"Invalid JSON from {url}: {e}") from e
