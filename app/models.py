"""Pydantic models describing catalog payloads."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .catalog import AggregatedItem, Translation


class TranslationOut(BaseModel):
    """One dub or subtitle variant offered for a title."""

    id: int
    title: str = ""
    type: str = ""

    @classmethod
    def from_translation(cls, translation: Translation) -> "TranslationOut":
        return cls(id=translation.id, title=translation.title, type=translation.kind)


class CatalogItem(BaseModel):
    """Represents a single de-duplicated title returned to callers."""

    kodik_id: str
    type: str = ""
    link: str = ""
    title: str = ""
    title_orig: str = ""
    other_title: str = ""
    description: str = ""
    year: int = 0
    episodes_count: int = 0
    poster_url: str = ""
    genres: list[str] = Field(default_factory=list)
    kinopoisk_id: str | None = None
    shikimori_id: str | None = None
    imdb_id: str | None = None
    rating: float = 0.0
    translations: list[TranslationOut] = Field(default_factory=list)
    raw: dict[str, Any] | None = None

    @classmethod
    def from_aggregated(
        cls, item: AggregatedItem, *, include_raw: bool = False
    ) -> "CatalogItem":
        record = item.record
        ids = record.external_ids
        return cls(
            kodik_id=record.id,
            type=record.kind,
            link=record.link,
            title=record.title,
            title_orig=record.original_title,
            other_title=record.alternate_title,
            description=record.description,
            year=record.year,
            episodes_count=record.episode_count,
            poster_url=record.poster_url,
            genres=list(record.genres),
            kinopoisk_id=ids.kinopoisk_id or None,
            shikimori_id=ids.shikimori_id or None,
            imdb_id=ids.imdb_id or None,
            rating=record.rating,
            translations=[
                TranslationOut.from_translation(translation)
                for translation in item.sorted_translations()
            ],
            raw=dict(record.raw) if include_raw else None,
        )


class CatalogPage(BaseModel):
    """A page of catalog items plus the total number of matches."""

    items: list[CatalogItem] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 20


class SearchRequest(BaseModel):
    """Body of a catalog search request."""

    model_config = ConfigDict(populate_by_name=True)

    query: str = ""
    page: int = 1
    page_size: int = Field(
        default=0, validation_alias=AliasChoices("page_size", "pageSize")
    )

    @field_validator("query", mode="before")
    @classmethod
    def _strip_query(cls, value: object) -> object:
        if value is None:
            return ""
        if isinstance(value, str):
            return value.strip()
        return value
