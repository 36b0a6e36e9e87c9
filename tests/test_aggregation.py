"""Canonical keys and group-by-key aggregation."""

from __future__ import annotations

import dataclasses

from app.catalog import (
    CatalogRecord,
    ExternalIds,
    Translation,
    aggregate,
    canonical_key,
    decode_page,
    merge_records,
)

from conftest import raw_material


def _record(record_id: str, title: str = "", **fields) -> CatalogRecord:
    return CatalogRecord(id=record_id, title=title, **fields)


def test_canonical_key_priority() -> None:
    both = _record(
        "1", "Naruto", external_ids=ExternalIds(kinopoisk_id="42", shikimori_id="20")
    )
    secondary = _record("2", "Naruto", external_ids=ExternalIds(shikimori_id="20"))
    titled = _record("3", "  NARUTO ", year=2002)

    assert canonical_key(both) == "xref1:42"
    assert canonical_key(secondary) == "xref2:20"
    assert canonical_key(titled) == "title:naruto|2002"


def test_canonical_key_keeps_different_years_apart() -> None:
    original = _record("1", "Hellsing", year=2001)
    remake = _record("2", "Hellsing", year=2006)

    assert canonical_key(original) != canonical_key(remake)


def test_canonical_key_ignores_translation() -> None:
    dub = _record("1", "Trigun", year=1998, translation=Translation(id=1, title="Dub"))
    sub = dataclasses.replace(dub, translation=Translation(id=2, title="Sub"))

    assert canonical_key(dub) == canonical_key(sub)


def test_canonical_key_for_untitled_record_uses_id() -> None:
    assert canonical_key(_record("movie-9")) == "id:movie-9"
    assert canonical_key(_record("movie-9", original_title="Akira", year=1988)) == (
        "title:akira|1988"
    )


def test_scenario_two_titles_from_three_rows() -> None:
    records = decode_page(
        [
            raw_material("serial-1", "Mushishi", kinopoisk_id="42", translation={"id": 1, "title": "Dub"}),
            raw_material("serial-2", "Mushishi", kinopoisk_id="42", translation={"id": 2, "title": "Sub"}),
            raw_material("serial-3", "Kino no Tabi", kinopoisk_id="7", translation={"id": 1, "title": "Dub"}),
        ]
    )

    items = aggregate(records)

    assert len(items) == 2
    by_key = {item.key: item for item in items}
    assert len(by_key["xref1:42"].translations) == 2
    assert len(by_key["xref1:7"].translations) == 1
    assert by_key["xref1:42"].member_count == 2


def test_single_member_group_is_identity() -> None:
    record = _record(
        "serial-1", "Planetes", rating=8.1, translation=Translation(id=3, title="Sub")
    )

    (item,) = aggregate([record])

    assert item.record == record
    assert item.translations == {3: Translation(id=3)}


def test_duplicate_translations_are_absorbed() -> None:
    xref = ExternalIds(kinopoisk_id="5")
    first = _record("a", "Monster", external_ids=xref, translation=Translation(id=9, title="AniDub"))
    second = _record("b", "Monster", external_ids=xref, translation=Translation(id=9, title="Other"))

    (item,) = aggregate([first, second])

    assert list(item.translations) == [9]
    assert item.translations[9].title == "AniDub"


def test_merge_policy_fills_gaps_and_keeps_max_rating() -> None:
    existing = _record("a", "Baccano!", rating=7.0, genres=("mystery",))
    incoming = _record(
        "b",
        "Baccano! (TV)",
        rating=8.4,
        poster_url="https://p/b.jpg",
        description="Immortals on a train.",
        genres=("action",),
    )

    merged = merge_records(existing, incoming)

    assert merged.id == "a"
    assert merged.title == "Baccano!"
    assert merged.poster_url == "https://p/b.jpg"
    assert merged.description == "Immortals on a train."
    assert merged.genres == ("mystery",)
    assert merged.rating == 8.4
    assert merge_records(merged, existing) is merged


def test_rating_merge_is_monotonic() -> None:
    xref = ExternalIds(kinopoisk_id="11")
    ratings = [6.5, 9.1, 0.0, 7.3]
    records = [
        _record(f"id-{index}", "Mononoke", external_ids=xref, rating=rating)
        for index, rating in enumerate(ratings)
    ]

    (item,) = aggregate(records)

    assert all(item.record.rating >= rating for rating in ratings)


def _arrival_independent(item):
    # The representative keeps its first member's translation; only the set is stable.
    return (
        item.key,
        dataclasses.replace(item.record, translation=None),
        sorted(item.translations),
    )


def test_output_sorted_by_title_regardless_of_arrival_order() -> None:
    records = [
        _record("1", "Zetman", external_ids=ExternalIds(kinopoisk_id="1")),
        _record("2", "Akira", external_ids=ExternalIds(kinopoisk_id="2")),
        _record("3", "Monster", external_ids=ExternalIds(kinopoisk_id="3"), translation=Translation(id=1)),
        _record("3", "Monster", external_ids=ExternalIds(kinopoisk_id="3"), translation=Translation(id=2)),
        _record("4", "Akira", year=1988),
    ]

    forward = aggregate(records)
    backward = aggregate(list(reversed(records)))

    assert [item.record.title for item in forward] == ["Akira", "Akira", "Monster", "Zetman"]
    assert [_arrival_independent(item) for item in forward] == [
        _arrival_independent(item) for item in backward
    ]


def test_sorted_translations_orders_by_id() -> None:
    xref = ExternalIds(kinopoisk_id="8")
    records = [
        _record("a", "Haibane Renmei", external_ids=xref, translation=Translation(id=30)),
        _record("a", "Haibane Renmei", external_ids=xref, translation=Translation(id=4)),
    ]

    (item,) = aggregate(records)

    assert [translation.id for translation in item.sorted_translations()] == [4, 30]
