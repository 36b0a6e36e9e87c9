"""High level orchestration for catalog search and item lookups."""

from __future__ import annotations

import logging
import re

from ..catalog import AggregatedItem, aggregate, decode_page, decode_record
from ..catalog.enrichment import Enricher
from ..config import Settings
from ..errors import DecodeError, NotFoundError
from ..models import CatalogItem, CatalogPage
from .kodik import KodikClient, RawPage

logger = logging.getLogger(__name__)

DIRECT_ID_RE = re.compile(r"^(?:kodik:)?((?:movie|serial)-\d+)$", re.IGNORECASE)


def parse_direct_id(query: str) -> str | None:
    """Return the Kodik id when ``query`` is an identifier rather than text."""

    match = DIRECT_ID_RE.match((query or "").strip())
    if not match:
        return None
    return match.group(1).lower()


class CatalogService:
    """Turn raw Kodik listings into de-duplicated catalog pages."""

    def __init__(self, settings: Settings, client: KodikClient, enricher: Enricher):
        self._settings = settings
        self._client = client
        self._enricher = enricher

    async def search(
        self, query: str, page: int = 1, page_size: int | None = None
    ) -> CatalogPage:
        """Return one page of aggregated titles matching ``query``.

        An empty query browses the listing; an identifier short-circuits to a
        direct lookup.
        """

        page = page if page and page >= 1 else 1
        if not page_size or page_size < 1 or page_size > 100:
            page_size = self._settings.default_page_size
        query = (query or "").strip()

        direct_id = parse_direct_id(query)
        if direct_id:
            return await self._search_direct(direct_id, page_size)
        if not query:
            return await self._browse(page, page_size)
        return await self._search_title(query, page, page_size)

    async def get_item(self, material_id: str, *, include_raw: bool = False) -> CatalogItem:
        """Return the enriched item for ``material_id``.

        :class:`NotFoundError` and :class:`UpstreamError` propagate.
        """

        item = await self._resolve_item(material_id)
        return CatalogItem.from_aggregated(item, include_raw=include_raw)

    async def _resolve_item(self, material_id: str) -> AggregatedItem:
        raw = await self._client.fetch_by_id(material_id, with_material_data=True)
        try:
            record = decode_record(raw)
        except DecodeError as exc:
            raise NotFoundError(material_id) from exc
        (item,) = aggregate([record])
        return await self._enricher.enrich(item)

    async def _search_direct(self, material_id: str, page_size: int) -> CatalogPage:
        logger.info("Search query %s treated as a direct identifier", material_id)
        try:
            item = await self._resolve_item(material_id)
        except NotFoundError:
            return CatalogPage(items=[], total=0, page=1, page_size=page_size)
        return CatalogPage(
            items=[CatalogItem.from_aggregated(item)],
            total=1,
            page=1,
            page_size=page_size,
        )

    async def _browse(self, page: int, page_size: int) -> CatalogPage:
        cursor: str | None = None
        last: RawPage | None = None
        for current in range(1, page + 1):
            if last is not None and not cursor:
                logger.info("Listing exhausted at page %s of %s", current - 1, page)
                return CatalogPage(
                    items=[], total=last.total, page=page, page_size=page_size
                )
            last = await self._client.fetch_page(
                page_size,
                next_page=cursor,
                types=self._settings.kodik_types_param,
                with_material_data=True,
            )
            cursor = last.next_page

        if last is None:
            return CatalogPage(items=[], total=0, page=page, page_size=page_size)
        items = aggregate(decode_page(last.results))
        return CatalogPage(
            items=[CatalogItem.from_aggregated(item) for item in items],
            total=last.total,
            page=page,
            page_size=page_size,
        )

    async def _search_title(self, query: str, page: int, page_size: int) -> CatalogPage:
        raw_page = await self._client.search_by_title(
            query,
            limit=self._settings.search_limit,
            types=self._settings.kodik_types_param,
            with_material_data=True,
        )
        items = aggregate(decode_page(raw_page.results))
        start = (page - 1) * page_size
        window = items[start : start + page_size]
        return CatalogPage(
            items=[CatalogItem.from_aggregated(item) for item in window],
            total=len(items),
            page=page,
            page_size=page_size,
        )
