"""Thin wrapper around the Kodik listing and search API."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from ..config import Settings
from ..errors import NotFoundError, UpstreamError, UpstreamTimeout
from ..utils import coerce_to_int, coerce_to_string

logger = logging.getLogger(__name__)

LIST_PATH = "/list"
SEARCH_PATH = "/search"
MAX_LIMIT = 100
SAMPLE_ID_COUNT = 5


@dataclass(slots=True)
class RawPage:
    """One page of raw upstream results plus its pagination cursors."""

    results: list[dict[str, Any]] = field(default_factory=list)
    total: int = 0
    next_page: str | None = None
    prev_page: str | None = None


class KodikClient:
    """Client responsible for fetching raw material listings from Kodik."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        if not settings.kodik_api_token:
            raise ValueError("Kodik API token is required when initialising KodikClient")
        self._settings = settings
        self._client = http_client

    async def fetch_page(
        self,
        limit: int,
        *,
        next_page: str | None = None,
        types: str | None = None,
        with_episodes: bool = False,
        with_material_data: bool = False,
    ) -> RawPage:
        """Fetch one page of the listing, following ``next_page`` when given."""

        params: dict[str, Any] = {"limit": self._clamp_limit(limit, 50)}
        cursor = self._cursor_from_next_page(next_page)
        if cursor:
            params["next"] = cursor
        if types:
            params["types"] = types
        if with_episodes:
            params["with_episodes"] = "true"
        if with_material_data:
            params["with_material_data"] = "true"
        return self._parse_page(await self._get(LIST_PATH, params))

    async def fetch_by_id(
        self, material_id: str, *, with_material_data: bool = False
    ) -> dict[str, Any]:
        """Return the raw object for ``material_id``.

        The listing endpoint is tried first and the search endpoint second;
        :class:`NotFoundError` is raised when neither returns the id.
        """

        params: dict[str, Any] = {"id": material_id, "limit": 50}
        if with_material_data:
            params["with_material_data"] = "true"

        listed = self._parse_page(await self._get(LIST_PATH, params)).results
        found = self._find_by_id(listed, material_id)
        if found is not None:
            return found

        logger.info("Material %s missing from /list, falling back to /search", material_id)
        searched = self._parse_page(await self._get(SEARCH_PATH, params)).results
        found = self._find_by_id(searched, material_id)
        if found is not None:
            return found

        examples = [
            coerce_to_string(entry.get("id"))
            for entry in listed[:SAMPLE_ID_COUNT] + searched[:SAMPLE_ID_COUNT]
        ]
        raise NotFoundError(material_id, examples)

    async def search_by_title(
        self,
        title: str,
        *,
        limit: int = 20,
        types: str | None = None,
        with_material_data: bool = False,
    ) -> RawPage:
        """Search materials whose title matches ``title``."""

        params: dict[str, Any] = {"limit": self._clamp_limit(limit, 20)}
        if title:
            params["title"] = title
        if types:
            params["types"] = types
        if with_material_data:
            params["with_material_data"] = "true"
        return self._parse_page(await self._get(SEARCH_PATH, params))

    async def search_by_cross_reference(
        self,
        *,
        kinopoisk_id: str | None = None,
        shikimori_id: str | None = None,
        imdb_id: str | None = None,
        limit: int = 100,
        with_material_data: bool = False,
    ) -> RawPage:
        """Search materials by an external catalog identifier."""

        params: dict[str, Any] = {"limit": self._clamp_limit(limit, 100)}
        if kinopoisk_id:
            params["kinopoisk_id"] = kinopoisk_id
        if shikimori_id:
            params["shikimori_id"] = shikimori_id
        if imdb_id:
            params["imdb_id"] = imdb_id
        if len(params) == 1:
            raise ValueError("At least one cross-reference identifier is required")
        if with_material_data:
            params["with_material_data"] = "true"
        return self._parse_page(await self._get(SEARCH_PATH, params))

    async def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        query = {"token": self._settings.kodik_api_token, **params}
        logger.debug("Kodik GET %s params=%s", path, params)
        try:
            response = await self._client.get(path, params=query)
        except httpx.TimeoutException as exc:
            raise UpstreamTimeout(f"Kodik request to {path} timed out") from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(
                f"Kodik request to {path} failed: {exc.__class__.__name__}"
            ) from exc

        if response.status_code >= 400:
            logger.warning(
                "Kodik %s responded with %s: %s",
                path,
                response.status_code,
                response.text[:200],
            )
            raise UpstreamError(
                f"Kodik {path} responded with {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamError(f"Kodik {path} returned malformed JSON") from exc
        if not isinstance(payload, dict):
            raise UpstreamError(f"Kodik {path} returned an unexpected payload")
        if payload.get("error"):
            raise UpstreamError(
                f"Kodik {path} reported an error: {coerce_to_string(payload['error'])}"
            )
        return payload

    @staticmethod
    def _parse_page(payload: dict[str, Any]) -> RawPage:
        results = payload.get("results")
        if not isinstance(results, list):
            results = []
        return RawPage(
            results=[entry for entry in results if isinstance(entry, dict)],
            total=coerce_to_int(payload.get("total")),
            next_page=coerce_to_string(payload.get("next_page")) or None,
            prev_page=coerce_to_string(payload.get("prev_page")) or None,
        )

    @staticmethod
    def _find_by_id(
        results: list[dict[str, Any]], material_id: str
    ) -> dict[str, Any] | None:
        for entry in results:
            if coerce_to_string(entry.get("id")) == material_id:
                return entry
        return None

    @staticmethod
    def _cursor_from_next_page(next_page: str | None) -> str | None:
        """Extract the ``next`` cursor when Kodik hands back a full page URL."""

        if not next_page:
            return None
        if next_page.startswith(("http://", "https://")):
            return httpx.URL(next_page).params.get("next") or None
        return next_page

    @staticmethod
    def _clamp_limit(limit: int | None, default: int) -> int:
        if limit is None or limit <= 0 or limit > MAX_LIMIT:
            return default
        return limit
