from packages.statement_ingestion.text_lines import (
    TextFragment,
    reconstruct_page_lines,
    reconstruct_text,
)


def test_fragments_on_one_baseline_join_left_to_right():
    fragments = [
        TextFragment(200, 700, "450.00"),
        TextFragment(10, 700, "29/10/2024"),
        TextFragment(90, 700, "SWIGGY"),
    ]
    assert reconstruct_page_lines(fragments) == ["29/10/2024 SWIGGY 450.00"]


def test_lines_are_read_top_to_bottom():
    fragments = [
        TextFragment(10, 680, "second"),
        TextFragment(10, 700, "first"),
    ]
    assert reconstruct_page_lines(fragments) == ["first", "second"]


def test_small_vertical_jitter_stays_on_one_line():
    fragments = [TextFragment(10, 700, "a"), TextFragment(50, 697, "b")]
    assert reconstruct_page_lines(fragments) == ["a b"]


def test_delta_beyond_tolerance_starts_new_line():
    fragments = [TextFragment(10, 700, "a"), TextFragment(50, 695, "b")]
    assert reconstruct_page_lines(fragments) == ["a", "b"]


def test_tolerance_is_measured_from_line_anchor():
    fragments = [
        TextFragment(10, 700, "a"),
        TextFragment(20, 697, "b"),
        TextFragment(30, 694, "c"),
    ]
    assert reconstruct_page_lines(fragments) == ["a b", "c"]


def test_line_is_reordered_by_x_after_grouping():
    # "B" sits slightly higher so it sorts first, but is further right
    fragments = [TextFragment(50, 700, "B"), TextFragment(10, 698, "A")]
    assert reconstruct_page_lines(fragments) == ["A B"]


def test_custom_tolerance():
    fragments = [TextFragment(10, 700, "a"), TextFragment(50, 694, "b")]
    assert reconstruct_page_lines(fragments, tolerance=8.0) == ["a b"]


def test_blank_fragments_are_skipped():
    fragments = [
        TextFragment(10, 700, "a"),
        TextFragment(20, 700, "   "),
        TextFragment(10, 650, ""),
    ]
    assert reconstruct_page_lines(fragments) == ["a"]


def test_empty_page():
    assert reconstruct_page_lines([]) == []


def test_pages_join_in_document_order():
    pages = [
        [TextFragment(10, 700, "page1-top"), TextFragment(10, 600, "page1-bottom")],
        [TextFragment(10, 700, "page2-top")],
    ]
    assert reconstruct_text(pages) == "page1-top\npage1-bottom\npage2-top"
