"""Secondary lookups that add translations and fill gaps in a resolved item."""

from __future__ import annotations

import logging

from ..config import Settings
from ..errors import UpstreamError
from ..services.kodik import KodikClient, RawPage
from .aggregation import AggregatedItem
from .decoder import decode_page
from .identity import canonical_key

logger = logging.getLogger(__name__)


class Enricher:
    """Merge sibling rows found through one extra Kodik search."""

    def __init__(self, client: KodikClient, settings: Settings):
        self._client = client
        self._settings = settings

    async def enrich(self, item: AggregatedItem) -> AggregatedItem:
        """Return ``item`` extended with every candidate sharing its key.

        Upstream failures are logged and the original item is returned.
        """

        record = item.record
        title = record.title.strip() or record.original_title.strip()
        try:
            if record.external_ids.kinopoisk_id:
                page = await self._client.search_by_cross_reference(
                    kinopoisk_id=record.external_ids.kinopoisk_id,
                    limit=self._settings.enrich_xref_limit,
                    with_material_data=True,
                )
            elif title:
                page = await self._client.search_by_title(
                    title,
                    limit=self._settings.enrich_title_limit,
                    with_material_data=True,
                )
            else:
                return item
        except UpstreamError as exc:
            logger.warning("Enrichment lookup failed for %s: %s", item.key, exc)
            return item

        return self._merge_candidates(item, page)

    @staticmethod
    def _merge_candidates(item: AggregatedItem, page: RawPage) -> AggregatedItem:
        enriched = item.copy()
        rejected = 0
        for candidate in decode_page(page.results):
            if canonical_key(candidate) != item.key:
                rejected += 1
                continue
            enriched.add(candidate)

        accepted = enriched.member_count - item.member_count
        logger.debug(
            "Enrichment for %s accepted %s and rejected %s candidates",
            item.key,
            accepted,
            rejected,
        )
        if not accepted:
            return item
        return enriched
