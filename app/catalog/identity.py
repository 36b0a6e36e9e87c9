"""Canonical keys used to group rows that describe the same title."""

from __future__ import annotations

from ..utils import normalize_title
from .records import CatalogRecord

PRIMARY_XREF_PREFIX = "xref1:"
SECONDARY_XREF_PREFIX = "xref2:"
TITLE_PREFIX = "title:"
ID_PREFIX = "id:"


def canonical_key(record: CatalogRecord) -> str:
    """Return the grouping key for ``record``.

    Kinopoisk ids win over Shikimori ids, which win over the normalized
    ``title|year`` pair. Same title with a different year never collides.
    """

    ids = record.external_ids
    if ids.kinopoisk_id:
        return f"{PRIMARY_XREF_PREFIX}{ids.kinopoisk_id}"
    if ids.shikimori_id:
        return f"{SECONDARY_XREF_PREFIX}{ids.shikimori_id}"

    title = normalize_title(record.title) or normalize_title(record.original_title)
    if not title:
        # Untitled rows only ever group with themselves.
        return f"{ID_PREFIX}{record.id}"
    return f"{TITLE_PREFIX}{title}|{record.year}"
