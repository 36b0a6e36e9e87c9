"""Catalog normalization and identity-resolution engine."""

from __future__ import annotations

from .aggregation import AggregatedItem, aggregate, merge_records
from .decoder import decode_page, decode_record, decode_translation
from .identity import canonical_key
from .records import CatalogRecord, ExternalIds, Translation

__all__ = [
    "AggregatedItem",
    "CatalogRecord",
    "ExternalIds",
    "Translation",
    "aggregate",
    "canonical_key",
    "decode_page",
    "decode_record",
    "decode_translation",
    "merge_records",
]
