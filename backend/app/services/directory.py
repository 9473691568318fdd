"""
Contractor directory client — resolves the read-only contractorDetails view.

The directory is an external service that owns contractor profiles; this
service stores only contractor ids. Lookups go over HTTP via httpx:

    GET {DIRECTORY_URL}/contractors/{contractor_id}  →  200 JSON profile

contractorDetails is display-only, so every failure mode (directory not
configured, 404, timeout, bad JSON) degrades to None and is logged —
it never fails the request that asked for the project.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Any

import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)


class ContractorDirectory:
    """Thin async client over the contractor directory API."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.base_url)

    async def get_contractor(
        self,
        contractor_id: str,
        client: httpx.AsyncClient | None = None,
    ) -> dict[str, Any] | None:
        """Fetch one contractor profile, or None if unavailable."""
        if not self.enabled:
            return None
        if client is None:
            async with self._client() as own_client:
                return await self._fetch(own_client, contractor_id)
        return await self._fetch(client, contractor_id)

    async def get_contractors(
        self,
        contractor_ids: Iterable[str],
    ) -> dict[str, dict[str, Any] | None]:
        """
        Resolve many ids concurrently over one client; each id is fetched once.

        A hung directory costs one timeout for the whole batch, not one per id.
        """
        unique_ids = list(dict.fromkeys(contractor_ids))
        if not self.enabled or not unique_ids:
            return {contractor_id: None for contractor_id in unique_ids}

        async with self._client() as client:
            results = await asyncio.gather(
                *(self._fetch(client, contractor_id) for contractor_id in unique_ids)
            )
        return dict(zip(unique_ids, results))

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        )

    async def _fetch(
        self,
        client: httpx.AsyncClient,
        contractor_id: str,
    ) -> dict[str, Any] | None:
        try:
            response = await client.get(f"/contractors/{contractor_id}")
        except httpx.HTTPError as exc:
            logger.warning(
                "Contractor directory unreachable for %s: %s",
                contractor_id, exc.__class__.__name__,
            )
            return None

        if response.status_code == 404:
            logger.warning("Contractor %s not found in directory", contractor_id)
            return None
        if response.status_code != 200:
            logger.warning(
                "Contractor directory error: status=%d body=%s",
                response.status_code,
                response.text[:200],
            )
            return None

        try:
            data = response.json()
        except ValueError:
            logger.warning("Contractor directory returned non-JSON for %s", contractor_id)
            return None
        if not isinstance(data, dict):
            logger.warning("Contractor directory returned a non-object for %s", contractor_id)
            return None
        return data


def get_directory() -> ContractorDirectory:
    """FastAPI dependency — the configured directory (may be disabled)."""
    return ContractorDirectory(
        settings.DIRECTORY_URL,
        timeout=settings.DIRECTORY_TIMEOUT_SECONDS,
    )
