"""Typed records produced from raw Kodik listing entries."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping


def _empty_raw() -> Mapping[str, Any]:
    return MappingProxyType({})


@dataclass(slots=True, frozen=True)
class Translation:
    """One audio or subtitle variant of a title.

    Identity is the upstream ``id`` alone.
    """

    id: int
    title: str = field(default="", compare=False)
    kind: str = field(default="", compare=False)


@dataclass(slots=True, frozen=True)
class ExternalIds:
    """Cross-reference identifiers; empty strings mean absent."""

    kinopoisk_id: str = ""
    shikimori_id: str = ""
    imdb_id: str = ""


@dataclass(slots=True, frozen=True)
class CatalogRecord:
    """Normalized view of a single upstream listing row."""

    id: str
    kind: str = ""
    link: str = ""
    title: str = ""
    original_title: str = ""
    alternate_title: str = ""
    description: str = ""
    year: int = 0
    episode_count: int = 0
    poster_url: str = ""
    genres: tuple[str, ...] = ()
    external_ids: ExternalIds = field(default_factory=ExternalIds)
    rating: float = 0.0
    translation: Translation | None = None
    raw: Mapping[str, Any] = field(
        default_factory=_empty_raw, compare=False, repr=False
    )
