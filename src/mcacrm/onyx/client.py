"""
Async HTTP client for the OnyxIQ API.

Only the read endpoints the full sync needs: paginated listings of clients,
applications and fundings. Authentication is a static bearer token.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

PAGE_SIZE = 100
MAX_PAGES = 1000


class OnyxClient:
    """
    Thin async wrapper over httpx.AsyncClient.

    Use as an async context manager, or call aclose() when done.
    """

    def __init__(
        self,
        base_url: str,
        bearer_token: str,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            base_url: API root, e.g. https://services.onyxiq.com/api
            bearer_token: OnyxIQ API token.
            timeout: per-request timeout in seconds.
            transport: optional httpx transport (tests pass httpx.MockTransport).
        """
        self._http = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
            headers={
                "Authorization": f"Bearer {bearer_token}",
                "Accept": "application/json, text/plain, */*",
            },
        )

    async def __aenter__(self) -> "OnyxClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET one endpoint and return the decoded JSON body."""
        response = await self._http.get(endpoint, params=params)
        response.raise_for_status()
        return response.json()

    async def fetch_paginated(
        self, endpoint: str, params: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """
        Walk every page of a listing endpoint.

        Records come back under "content" (or "details" on older endpoints).
        Stops at the first empty page, or after MAX_PAGES as a safety net.
        """
        records: List[Dict[str, Any]] = []
        page = 0
        while page < MAX_PAGES:
            data = await self.get(
                endpoint,
                params={"page": page, "size": PAGE_SIZE, "sortDir": "DESC", **(params or {})},
            )
            batch = data.get("content") or data.get("details") or []
            if not batch:
                break
            records.extend(batch)
            page += 1
        else:
            logger.warning("Reached page limit (%d) for %s", MAX_PAGES, endpoint)
        return records
