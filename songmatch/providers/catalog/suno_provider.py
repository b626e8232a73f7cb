"""Suno profile API provider implementing ICatalogProvider.

Fetches one page of a public Suno profile's clips per call.  No API key is
required.  Every failure (non-2xx status, transport error, timeout,
undecodable or unexpected body) is reported as an absent page; nothing is
retried here because the collector already tolerates runs of missing pages.
"""

from __future__ import annotations

import asyncio
from urllib.parse import quote

import httpx

from songmatch.interfaces.catalog_provider import ICatalogProvider
from songmatch.models.catalog import CatalogEntry, CatalogPage
from songmatch.models.raw import entry_from_raw, extract_clips
from songmatch.utils.logging import get_logger

_DEFAULT_BASE_URL = "https://studio-api.prod.suno.com"
_PROFILE_PATH = "/api/profiles/{artist}"
_DEFAULT_PAGE_TIMEOUT = 15.0


class SunoCatalogProvider(ICatalogProvider):
    """Catalog provider backed by the Suno studio profile endpoint.

    The ``httpx.AsyncClient`` is injected for testability and so that one
    connection pool is shared across the application.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str = _DEFAULT_BASE_URL,
        page_timeout: float = _DEFAULT_PAGE_TIMEOUT,
    ) -> None:
        self._http = http_client
        self._base_url = base_url.rstrip("/")
        self._page_timeout = page_timeout
        self._logger = get_logger(__name__)

    def get_provider_name(self) -> str:
        return "suno"

    def build_url(self, artist_key: str) -> str:
        return self._base_url + _PROFILE_PATH.format(artist=quote(artist_key, safe=""))

    async def fetch_page(self, artist_key: str, page: int) -> CatalogPage | None:
        url = self.build_url(artist_key)
        params = {
            "clips_sort_by": "created_at",
            "playlists_sort_by": "created_at",
            "page": page,
        }
        headers = {"Accept": "application/json"}

        try:
            response = await asyncio.wait_for(
                self._http.get(url, params=params, headers=headers),
                timeout=self._page_timeout,
            )
        except asyncio.TimeoutError:
            self._logger.warning(
                "suno_page_timeout", artist=artist_key, page=page, timeout=self._page_timeout
            )
            return None
        except httpx.HTTPError as exc:
            self._logger.warning("suno_request_failed", artist=artist_key, page=page, error=str(exc))
            return None

        if not response.is_success:
            self._logger.debug("suno_http_error", artist=artist_key, page=page, status=response.status_code)
            return None

        try:
            payload = response.json()
        except ValueError as exc:
            self._logger.warning("suno_invalid_json", artist=artist_key, page=page, error=str(exc))
            return None

        clips = extract_clips(payload)
        if clips is None:
            self._logger.debug("suno_page_missing_clips", artist=artist_key, page=page)
            return None

        entries: list[CatalogEntry] = []
        for raw in clips:
            entry = entry_from_raw(raw)
            if entry is not None:
                entries.append(entry)

        self._logger.debug(
            "suno_page_fetched",
            artist=artist_key,
            page=page,
            clips=len(clips),
            entries=len(entries),
        )
        return CatalogPage(page=page, entries=tuple(entries), skipped=len(clips) - len(entries))
