"""Group-by-key aggregation of translation rows into single catalog items."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Iterable

from .identity import canonical_key
from .records import CatalogRecord, Translation

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AggregatedItem:
    """One logical title folded from every row sharing its canonical key.

    ``record.translation`` is whatever the first member carried; the full set
    of variants lives in ``translations``.
    """

    key: str
    record: CatalogRecord
    translations: dict[int, Translation] = field(default_factory=dict)
    member_count: int = 0

    def add(self, record: CatalogRecord) -> None:
        """Fold ``record`` into this item."""

        if self.member_count:
            self.record = merge_records(self.record, record)
        self.member_count += 1
        if record.translation is not None:
            self.translations.setdefault(record.translation.id, record.translation)

    def sorted_translations(self) -> list[Translation]:
        return [self.translations[key] for key in sorted(self.translations)]

    def copy(self) -> "AggregatedItem":
        return AggregatedItem(
            key=self.key,
            record=self.record,
            translations=dict(self.translations),
            member_count=self.member_count,
        )


def merge_records(existing: CatalogRecord, incoming: CatalogRecord) -> CatalogRecord:
    """Merge ``incoming`` into ``existing`` and return the representative.

    Poster, description and genres are filled only when still empty, rating
    keeps the maximum, everything else stays with the first writer.
    """

    update: dict[str, object] = {}
    if not existing.poster_url and incoming.poster_url:
        update["poster_url"] = incoming.poster_url
    if not existing.description and incoming.description:
        update["description"] = incoming.description
    if not existing.genres and incoming.genres:
        update["genres"] = incoming.genres
    if incoming.rating > existing.rating:
        update["rating"] = incoming.rating

    if not update:
        return existing
    return dataclasses.replace(existing, **update)


def aggregate(records: Iterable[CatalogRecord]) -> list[AggregatedItem]:
    """Group ``records`` by canonical key and return items sorted by title."""

    groups: dict[str, AggregatedItem] = {}
    total = 0
    for record in records:
        total += 1
        key = canonical_key(record)
        item = groups.get(key)
        if item is None:
            item = groups[key] = AggregatedItem(key=key, record=record)
        item.add(record)

    logger.debug("Aggregated %s records into %s items", total, len(groups))
    return sorted(groups.values(), key=lambda item: (item.record.title, item.key))
