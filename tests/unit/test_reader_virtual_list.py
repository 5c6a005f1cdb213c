import pytest

from canon_reader.services.reader import Anchor, DisplaySettings, ReaderSettings, SizeEstimator, VirtualList
from canon_reader.services.reader.config_schema import ListConfig, SizingConfig
from canon_reader.services.reader.types import Segment

ROW = 100.0


def _segments(resolver, chapters) -> list[Segment]:
    segments = []
    for chapter in chapters:
        for verse in range(1, 11):
            ref = resolver.parse(f"Genesis.{chapter}.{verse}")
            segments.append(Segment(
                id=ref.serialize(),
                ref=ref,
                primary_text="a",
                c1=chapter,
                c2=verse,
                owner_book_id="Genesis",
                book_order=1,
            ))
    return segments


@pytest.fixture
def settings() -> ReaderSettings:
    return ReaderSettings(DisplaySettings())


@pytest.fixture
def virtual_list(resolver, settings) -> VirtualList:
    # Every row estimates to exactly ROW pixels
    estimator = SizeEstimator(SizingConfig(min_height=ROW, line_height_factor=1.0, padding=0))
    vlist = VirtualList(estimator, settings, ListConfig(viewport_height=500, overscan=2))
    vlist.set_items(_segments(resolver, range(1, 11)))
    return vlist


def test_offsets_and_total_size(virtual_list: VirtualList) -> None:
    assert virtual_list.item_count == 100
    assert virtual_list.get_item_offset(0) == 0
    assert virtual_list.get_item_offset(37) == 37 * ROW
    assert virtual_list.total_size == 100 * ROW


def test_visible_range_with_overscan(virtual_list: VirtualList) -> None:
    viewport = virtual_list.scroll_to(1050)

    assert viewport.visible_start_index == 10
    assert viewport.visible_stop_index == 15
    assert viewport.overscan_start_index == 8
    assert viewport.overscan_stop_index == 17


def test_render_materializes_only_overscan_range(virtual_list: VirtualList) -> None:
    virtual_list.scroll_to(3000)

    rendered = virtual_list.render()

    assert [item.index for item in rendered] == list(range(28, 37))
    assert rendered[0].offset == 28 * ROW
    assert rendered[0].segment.ref.serialize() == "Genesis.3.9"


def test_scroll_offset_is_clamped(virtual_list: VirtualList) -> None:
    assert virtual_list.scroll_to(-50).scroll_offset == 0
    assert virtual_list.scroll_to(1e9).scroll_offset == 100 * ROW - 500


@pytest.mark.parametrize(
    ("align", "expected"),
    [("start", 1000), ("end", 600), ("center", 800), ("auto", 600), ("smart", 800)],
)
def test_scroll_to_item_alignment(virtual_list: VirtualList, align: str, expected: float) -> None:
    virtual_list.scroll_to_item(10, align)

    assert virtual_list.scroll_offset == expected


def test_auto_and_smart_keep_visible_items_in_place(virtual_list: VirtualList) -> None:
    virtual_list.scroll_to(800)

    virtual_list.scroll_to_item(10, "auto")
    assert virtual_list.scroll_offset == 800

    virtual_list.scroll_to_item(9, "smart")
    assert virtual_list.scroll_offset == 800


def test_scroll_to_last_item_start_is_clamped(virtual_list: VirtualList) -> None:
    virtual_list.scroll_to_item(99, "start")

    assert virtual_list.scroll_offset == 100 * ROW - 500


def test_unknown_alignment_is_rejected(virtual_list: VirtualList) -> None:
    with pytest.raises(ValueError):
        virtual_list.scroll_to_item(1, "top")


def test_measured_size_takes_precedence(virtual_list: VirtualList) -> None:
    virtual_list.get_item_offset(50)

    virtual_list.set_item_size(0, 300)

    assert virtual_list.get_item_size(0) == 300
    assert virtual_list.get_item_offset(1) == 300
    assert virtual_list.get_item_offset(50) == 300 + 49 * ROW
    assert virtual_list.total_size == 300 + 99 * ROW


def test_reset_after_index_drops_later_sizes(virtual_list: VirtualList) -> None:
    virtual_list.set_item_size(2, 250)
    virtual_list.set_item_size(7, 250)

    virtual_list.reset_after_index(5)

    assert virtual_list.get_item_size(2) == 250
    assert virtual_list.get_item_size(7) == ROW
    assert virtual_list.get_item_offset(8) == 8 * ROW + 150


def test_new_item_sequence_clears_measurements(virtual_list: VirtualList, resolver) -> None:
    virtual_list.set_item_size(0, 400)

    virtual_list.set_items(_segments(resolver, range(1, 12)))

    assert virtual_list.get_item_size(0) == ROW


def test_display_change_resets_sizes(virtual_list: VirtualList, settings: ReaderSettings) -> None:
    virtual_list.set_item_size(3, 420)

    settings.update(theme="sepia")

    assert virtual_list.get_item_size(3) == ROW


def test_visible_ref_is_emitted_once_per_change(virtual_list: VirtualList) -> None:
    seen: list[str] = []
    virtual_list.subscribe_visible_ref(lambda ref: seen.append(ref.serialize()))

    virtual_list.render()
    virtual_list.scroll_to(50)
    virtual_list.render()
    virtual_list.scroll_to(1010)
    virtual_list.render()

    assert seen == ["Genesis.1.1", "Genesis.2.1"]


def test_anchor_survives_prepend(resolver, settings) -> None:
    estimator = SizeEstimator(SizingConfig(min_height=ROW, line_height_factor=1.0, padding=0))
    vlist = VirtualList(estimator, settings, ListConfig(viewport_height=500, overscan=2))
    vlist.set_items(_segments(resolver, range(2, 11)))
    vlist.scroll_to(1234)

    anchor = vlist.capture_anchor()
    assert anchor.ref == resolver.parse("Genesis.3.3")
    assert anchor.delta == pytest.approx(34)
    before = vlist.get_item_offset(12) - vlist.scroll_offset

    vlist.set_items(_segments(resolver, [1]) + list(vlist.items))

    assert vlist.restore_anchor(anchor) is True
    index = vlist.index_of(anchor.ref)
    assert index == 22
    after = vlist.get_item_offset(index) - vlist.scroll_offset
    assert after == pytest.approx(before, abs=0.5)


def test_restore_fails_when_anchor_left_window(virtual_list: VirtualList, resolver) -> None:
    anchor = Anchor(ref=resolver.parse("Exodus.1.1"), delta=0)

    assert virtual_list.restore_anchor(anchor) is False


def test_handle_drives_the_list(virtual_list: VirtualList) -> None:
    handle = virtual_list.handle

    handle.scroll_to_item(20, "start")
    assert virtual_list.scroll_offset == 2000

    handle.reset_after_index(0)
    handle.scroll_to(100)
    assert virtual_list.scroll_offset == 100


def test_resize_recomputes_viewport(virtual_list: VirtualList) -> None:
    virtual_list.resize(1000)

    assert virtual_list.viewport.visible_stop_index == 9
