# pharmalink/net.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .config import Settings
from .errors import UpstreamError

log = logging.getLogger("pharmalink.net")

# Upper bound on how much of an unusable body ends up in an error message
BODY_EXCERPT_CHARS = 2000


def _ua_headers(settings: Settings, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    base = {"User-Agent": settings.user_agent, "Accept": "application/json"}
    if extra:
        base.update(extra)
    return base


def build_timeout(settings: Settings) -> httpx.Timeout:
    return httpx.Timeout(settings.http_timeout_s, connect=settings.http_connect_timeout_s)


def build_client(settings: Settings, **kwargs: Any) -> httpx.AsyncClient:
    """Shared AsyncClient for all collaborator calls of one process."""
    return httpx.AsyncClient(
        timeout=build_timeout(settings),
        headers=_ua_headers(settings),
        follow_redirects=True,
        **kwargs,
    )


async def aget_json(
    http: httpx.AsyncClient,
    url: str,
    *,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    source: str = "upstream",
) -> Any:
    """
    One GET, parsed as JSON. No retries.

    Every failure (timeout, connection error, HTTP error status, non-JSON body)
    is raised as UpstreamError tagged with `source`.
    """
    log.info("Connecting to %s", url)
    try:
        r = await http.get(url, params=params, headers=headers)
    except httpx.TimeoutException as e:
        raise UpstreamError(source, f"timed out calling {url}: {e!r}") from e
    except httpx.HTTPError as e:
        raise UpstreamError(source, f"request to {url} failed: {e!r}") from e

    if r.status_code >= 400:
        raise UpstreamError(
            source,
            f"{url} -> HTTP {r.status_code}\n{r.text[:BODY_EXCERPT_CHARS]}",
        )

    try:
        return r.json()
    except ValueError as e:
        raise UpstreamError(
            source,
            f"{e}\n\n{source} sent a non-JSON response:\n{r.text[:BODY_EXCERPT_CHARS]}",
        ) from e
