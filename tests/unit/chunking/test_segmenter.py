"""Unit tests for DOM-aware HTML segmentation."""

from __future__ import annotations

import pytest

from doclens.chunking import ContentSection, HtmlDomSegmenter


@pytest.fixture
def segmenter(word_tokenizer) -> HtmlDomSegmenter:
    return HtmlDomSegmenter(word_tokenizer)


class TestSegmentation:
    """Test section discovery."""

    def test_empty_html(self, segmenter):
        assert segmenter.segment("") == []
        assert segmenter.segment("<script>only()</script>") == []

    def test_breadcrumbs_follow_heading_levels(self, segmenter):
        html = (
            "<h1>Guide</h1><p>a b c</p>"
            "<h2>Setup</h2><p>d e</p>"
            "<h3>Detail</h3><p>f</p>"
            "<h2>Usage</h2><p>g h</p>"
        )
        sections = segmenter.segment(html)

        assert [s.breadcrumb for s in sections] == [
            ("Guide",),
            ("Guide", "Setup"),
            ("Guide", "Setup", "Detail"),
            ("Guide", "Usage"),
        ]
        assert [s.title for s in sections] == ["Guide", "Setup", "Detail", "Usage"]
        assert sections[0].token_count == 3

    def test_walk_confined_to_main_region(self, segmenter):
        html = "<div><p>outside text</p></div><main><h2>Inside</h2><p>kept text</p></main>"
        sections = segmenter.segment(html)

        assert len(sections) == 1
        assert sections[0].text == "kept text"
        assert sections[0].breadcrumb == ("Inside",)

    def test_role_main_counts_as_main_region(self, segmenter):
        html = '<p>outside</p><div role="main"><p>inside</p></div>'

        assert [s.text for s in segmenter.segment(html)] == ["inside"]

    def test_boilerplate_removed_before_walk(self, segmenter):
        html = "<nav><p>menu entry</p></nav><p>body text</p>"

        assert [s.text for s in segmenter.segment(html)] == ["body text"]

    def test_nested_blocks_emitted_once(self, segmenter):
        """A list is one block even when its items hold paragraphs."""
        html = "<ul><li><p>one</p></li><li>two</li></ul>"
        sections = segmenter.segment(html)

        assert len(sections) == 1
        assert sections[0].text == "one two"

    def test_whitespace_normalized(self, segmenter):
        sections = segmenter.segment("<p>  spaced \n\n  out   words </p>")

        assert sections[0].text == "spaced out words"

    @pytest.mark.asyncio
    async def test_segment_async(self, segmenter):
        sections = await segmenter.segment_async("<h2>A</h2><p>x y</p>", "doc-1")

        assert sections[0].breadcrumb == ("A",)


class TestMerge:
    """Test merging of adjacent small sections."""

    def test_small_paragraphs_under_one_heading_merge(self, segmenter, make_words):
        paragraphs = "".join(f"<p>{make_words(80, stem=f'p{i}w')}</p>" for i in range(3))
        sections = segmenter.segment(f"<h2>Background</h2>{paragraphs}")

        assert len(sections) == 1
        assert sections[0].breadcrumb == ("Background",)
        assert sections[0].token_count == 240
        assert sections[0].text.count("\n\n") == 2

    def test_merge_flushes_once_minimum_reached(self, segmenter, make_words):
        paragraphs = "".join(f"<p>{make_words(100)}</p>" for _ in range(3))
        sections = segmenter.segment(f"<h2>Background</h2>{paragraphs}")

        assert [s.token_count for s in sections] == [200, 100]

    def test_different_breadcrumbs_never_merge(self, segmenter):
        sections = segmenter.merge(
            [ContentSection("a", ("A",), 1), ContentSection("b", ("B",), 1), ContentSection("c", ("A",), 1)]
        )

        assert [s.text for s in sections] == ["a", "b", "c"]

    def test_merge_respects_max_tokens(self, word_tokenizer):
        segmenter = HtmlDomSegmenter(word_tokenizer, min_tokens=100, max_tokens=150)
        sections = segmenter.merge([ContentSection("x " * 80, ("A",), 80) for _ in range(3)])

        assert [s.token_count for s in sections] == [80, 80, 80]

    def test_merged_section_keeps_last_title(self, segmenter):
        parts = [ContentSection("a b", ("Root", "Leaf"), 150), ContentSection("c d", ("Root", "Leaf"), 60)]
        merged = segmenter.merge(parts)

        assert len(merged) == 1
        assert merged[0].title == "Leaf"
        assert merged[0].text == "a b\n\nc d"

    def test_min_above_max_rejected(self, word_tokenizer):
        with pytest.raises(ValueError):
            HtmlDomSegmenter(word_tokenizer, min_tokens=500, max_tokens=100)
