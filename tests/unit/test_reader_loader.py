import random

import pytest

from canon_reader.services.reader import (
    BoundaryNotFound,
    Edge,
    FetchError,
    PageLoader,
    SectionCursor,
)
from canon_reader.services.reader.config_schema import LoaderConfig
from conftest import verse_records


@pytest.mark.anyio
async def test_last_chapter_points_to_next_book(loader: PageLoader) -> None:
    page = await loader.load_page(SectionCursor(book_slug="Genesis", section_prefix="Genesis.50"))

    assert page.section_prefix == "Genesis.50"
    assert [segment.ref.serialize() for segment in page.segments][:2] == ["Genesis.50.1", "Genesis.50.2"]
    assert page.next_cursor.serialize() == "Exodus.1"
    assert page.prev_cursor.serialize() == "Genesis.49"

    following = await loader.load_page(page.next_cursor)

    assert following.book_slug == "Exodus"
    assert following.segments[0].ref.serialize() == "Exodus.1.1"
    assert following.prev_cursor.serialize() == "Genesis.50"
    assert following.segments[0].sort_key > page.segments[-1].sort_key


@pytest.mark.anyio
async def test_backward_into_previous_book_uses_its_last_section(loader: PageLoader) -> None:
    page = await loader.load_page("Exodus.1")

    assert page.prev_cursor.serialize() == "Genesis.50"


@pytest.mark.anyio
async def test_corpus_edges_have_no_cursor(loader: PageLoader) -> None:
    first = await loader.load_page("Genesis.1")
    last = await loader.load_page("II_Chronicles.36")

    assert first.prev_cursor is None
    assert last.next_cursor is None


@pytest.mark.anyio
async def test_string_cursor_with_full_reference_loads_its_section(loader: PageLoader) -> None:
    page = await loader.load_page("Genesis.12.3")

    assert page.section_prefix == "Genesis.12"
    assert len(page.segments) == 10


@pytest.mark.anyio
async def test_daf_pages_step_by_amud(loader: PageLoader) -> None:
    page = await loader.load_page("Berakhot.3a")

    assert page.prev_cursor.serialize() == "Berakhot.2b"
    assert page.next_cursor.serialize() == "Berakhot.3b"
    assert page.segments[0].ref.serialize() == "Berakhot.3a.1"
    assert page.segments[0].c1 == 5


def test_talmud_does_not_cross_tractates_by_default(loader: PageLoader, resolver) -> None:
    last_amud = resolver.parse("Berakhot.64b", allow_partial=True)

    with pytest.raises(BoundaryNotFound):
        loader.neighbour(last_amud, Edge.FORWARD)


def test_cross_book_collections_are_configurable(store, resolver) -> None:
    loader = PageLoader(store, resolver, LoaderConfig(cross_book_collections=["Tanakh", "talmud"]))
    last_amud = resolver.parse("Berakhot.64b", allow_partial=True)

    assert loader.neighbour(last_amud, Edge.FORWARD).serialize() == "Shabbat.2a"


def test_tanakh_boundary_disabled_when_not_listed(store, resolver) -> None:
    loader = PageLoader(store, resolver, LoaderConfig(cross_book_collections=[]))

    with pytest.raises(BoundaryNotFound):
        loader.neighbour(resolver.parse("Genesis.50", allow_partial=True), Edge.FORWARD)


@pytest.mark.anyio
async def test_segments_are_sorted_and_deduplicated(store, loader: PageLoader) -> None:
    records = verse_records("Genesis", 2)
    shuffled = records + records[:3]
    random.Random(7).shuffle(shuffled)
    store.sections["Genesis.2"] = shuffled

    page = await loader.load_page("Genesis.2")

    assert [segment.c2 for segment in page.segments] == list(range(1, 11))


@pytest.mark.anyio
async def test_missing_section_yields_empty_page_with_cursors(store, loader: PageLoader) -> None:
    del store.sections["Genesis.5"]

    page = await loader.load_page("Genesis.5")

    assert page.is_empty
    assert page.next_cursor.serialize() == "Genesis.6"


@pytest.mark.anyio
async def test_section_outside_book_is_boundary(loader: PageLoader) -> None:
    with pytest.raises(BoundaryNotFound):
        await loader.load_page("Genesis.51")


@pytest.mark.anyio
async def test_storage_failure_becomes_fetch_error(store, loader: PageLoader) -> None:
    store.failures["Genesis.3"] = ConnectionError("store down")

    with pytest.raises(FetchError) as exc_info:
        await loader.load_page("Genesis.3", edge="forward")

    error = exc_info.value
    assert error.ref == "Genesis.3"
    assert error.detail["edge"] == "forward"
    assert "store down" in error.detail["error"]
    assert isinstance(error.__cause__, ConnectionError)


@pytest.mark.anyio
async def test_malformed_record_is_fetch_error(store, loader: PageLoader) -> None:
    store.sections["Genesis.4"] = [{"primary_text": "no ref"}]

    with pytest.raises(FetchError):
        await loader.load_page("Genesis.4")


@pytest.mark.anyio
async def test_record_from_another_section_is_rejected(store, loader: PageLoader) -> None:
    store.sections["Genesis.4"] = verse_records("Genesis", 5)

    with pytest.raises(FetchError):
        await loader.load_page("Genesis.4")


@pytest.mark.anyio
async def test_segments_carry_book_order(loader: PageLoader, catalog) -> None:
    page = await loader.load_page("Exodus.2")

    assert {segment.book_order for segment in page.segments} == {catalog.get_book("Exodus").order}
    assert {segment.owner_book_id for segment in page.segments} == {"Exodus"}


@pytest.mark.anyio
async def test_three_level_page_carries_all_ordinals(loader: PageLoader) -> None:
    page = await loader.load_page("Jerusalem_Talmud_Berakhot.1.2.3")

    assert page.section_prefix == "Jerusalem_Talmud_Berakhot.1"
    assert [(s.c1, s.c2, s.c3) for s in page.segments[:4]] == [(1, 1, 1), (1, 1, 2), (1, 1, 3), (1, 2, 1)]
    assert page.prev_cursor is None
    assert page.next_cursor.serialize() == "Jerusalem_Talmud_Berakhot.2"

    last = await loader.load_page("Jerusalem_Talmud_Berakhot.9")
    assert last.next_cursor is None
    assert last.prev_cursor.serialize() == "Jerusalem_Talmud_Berakhot.8"


@pytest.mark.anyio
async def test_single_level_page_defaults_lower_ordinals(loader: PageLoader) -> None:
    page = await loader.load_page("Sefer_HaChinukh.2")

    assert page.section_prefix == "Sefer_HaChinukh.2"
    assert len(page.segments) == 1
    segment = page.segments[0]
    assert (segment.c1, segment.c2, segment.c3) == (2, 1, None)
    assert segment.ref.serialize() == "Sefer_HaChinukh.2"
    assert page.prev_cursor.serialize() == "Sefer_HaChinukh.1"
    assert page.next_cursor.serialize() == "Sefer_HaChinukh.3"

    assert (await loader.load_page("Sefer_HaChinukh.1")).prev_cursor is None
    assert (await loader.load_page("Sefer_HaChinukh.613")).next_cursor is None


@pytest.mark.anyio
async def test_malformed_record_is_counted_as_failed_load(store, loader: PageLoader) -> None:
    from prometheus_client import CollectorRegistry

    from canon_reader.services.reader import metrics as reader_metrics

    registry = CollectorRegistry()
    original = reader_metrics.get_metrics()
    reader_metrics.set_metrics(reader_metrics.ReaderMetrics(registry=registry))
    store.sections["Genesis.4"] = verse_records("Genesis", 5)
    try:
        with pytest.raises(FetchError):
            await loader.load_page("Genesis.4", edge="forward")
    finally:
        reader_metrics.set_metrics(original)

    assert registry.get_sample_value(
        "reader_page_loads_total", {"edge": "forward", "outcome": "error"}
    ) == pytest.approx(1)
    assert registry.get_sample_value("reader_page_loads_total", {"edge": "forward", "outcome": "ok"}) is None
