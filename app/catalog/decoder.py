"""Tolerant decoding of raw Kodik JSON objects into typed records.

Every field is read independently: a missing or wrongly typed value degrades
to its zero value instead of invalidating the whole record. The only hard
failure is a record without a usable ``id``.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from ..errors import DecodeError, DecodeFailure
from ..utils import coerce_to_float, coerce_to_int, coerce_to_str_list, coerce_to_string
from .records import CatalogRecord, ExternalIds, Translation

logger = logging.getLogger(__name__)

ENRICHMENT_KEY = "material_data"


def decode_record(raw: Any) -> CatalogRecord:
    """Return a :class:`CatalogRecord` for ``raw`` or raise :class:`DecodeError`."""

    if not isinstance(raw, Mapping):
        raise DecodeError(DecodeFailure.MISSING_IDENTIFIER, raw)
    raw_id = raw.get("id")
    if isinstance(raw_id, bool) or not isinstance(raw_id, (str, int, float)):
        raise DecodeError(DecodeFailure.MISSING_IDENTIFIER, raw)
    record_id = coerce_to_string(raw_id).strip()
    if not record_id:
        raise DecodeError(DecodeFailure.MISSING_IDENTIFIER, raw)

    def text(key: str) -> str:
        return coerce_to_string(raw.get(key)).strip()

    episode_count = coerce_to_int(raw.get("episodes_count"))
    if not episode_count:
        episode_count = coerce_to_int(raw.get("last_episode"))

    description = text("description")
    poster_url = text("poster_url") or text("image")
    genres = coerce_to_str_list(raw.get("genres"))
    rating = 0.0

    extra = raw.get(ENRICHMENT_KEY)
    if isinstance(extra, Mapping):
        rating = _enrichment_rating(extra)
        if not genres:
            genres = coerce_to_str_list(extra.get("genres")) or coerce_to_str_list(
                extra.get("anime_genres")
            )
        if not poster_url:
            poster_url = _first_text(extra, "poster_url", "anime_poster_url")
        if not description:
            description = _first_text(extra, "description", "anime_description")

    return CatalogRecord(
        id=record_id,
        kind=text("type"),
        link=text("link"),
        title=text("title"),
        original_title=text("title_orig"),
        alternate_title=text("other_title"),
        description=description,
        year=coerce_to_int(raw.get("year")),
        episode_count=episode_count,
        poster_url=poster_url,
        genres=genres,
        external_ids=ExternalIds(
            kinopoisk_id=text("kinopoisk_id"),
            shikimori_id=text("shikimori_id"),
            imdb_id=text("imdb_id"),
        ),
        rating=rating,
        translation=decode_translation(raw.get("translation")),
        raw=MappingProxyType(dict(raw)),
    )


def decode_translation(value: Any) -> Translation | None:
    """Decode a nested translation object, dropping malformed ones."""

    if not isinstance(value, Mapping):
        return None
    translation_id = coerce_to_int(value.get("id"))
    if translation_id <= 0:
        return None
    return Translation(
        id=translation_id,
        title=coerce_to_string(value.get("title")).strip(),
        kind=coerce_to_string(value.get("type")).strip(),
    )


def decode_page(raws: Iterable[Any]) -> list[CatalogRecord]:
    """Decode a page of raw objects, skipping entries that cannot be decoded."""

    records: list[CatalogRecord] = []
    dropped = 0
    for raw in raws:
        try:
            records.append(decode_record(raw))
        except DecodeError as exc:
            dropped += 1
            logger.debug("Dropping upstream record: %s", exc)
    if dropped:
        logger.debug("Dropped %s of %s upstream records", dropped, dropped + len(records))
    return records


def _enrichment_rating(extra: Mapping[str, Any]) -> float:
    rating = coerce_to_float(extra.get("kinopoisk_rating"))
    if rating <= 0:
        rating = coerce_to_float(extra.get("shikimori_rating"))
    return max(rating, 0.0)


def _first_text(source: Mapping[str, Any], *keys: str) -> str:
    for key in keys:
        value = coerce_to_string(source.get(key)).strip()
        if value:
            return value
    return ""
