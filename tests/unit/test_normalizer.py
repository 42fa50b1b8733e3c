"""Unit tests for the content normalizer."""

from __future__ import annotations

import pytest

from sitewatch.normalizer import canonicalize, extract_text, normalize


class TestExtractText:
    def test_whole_page_without_selector(self) -> None:
        html = "<html><body><h1>Title</h1><p>Body text</p></body></html>"
        assert canonicalize(extract_text(html)) == "Title Body text"

    def test_scripts_and_styles_are_not_visible(self) -> None:
        html = (
            "<body><script>var x = 1;</script><style>p {color: red}</style>"
            "<noscript>Enable JS</noscript><p>Visible</p></body>"
        )
        assert canonicalize(extract_text(html)) == "Visible"

    def test_selector_restricts_text(self) -> None:
        html = "<body><nav>Menu</nav><main><p>Article</p></main><footer>Foot</footer></body>"
        assert canonicalize(extract_text(html, "main")) == "Article"

    def test_selector_matching_several_nodes_keeps_document_order(self) -> None:
        html = "<div class='item'>One</div><p>skip</p><div class='item'>Two</div>"
        assert canonicalize(extract_text(html, ".item")) == "One Two"

    def test_selector_without_match_yields_empty_text(self) -> None:
        html = "<body><p>Content</p></body>"
        assert extract_text(html, "#missing") == ""

    def test_exclude_selectors_removed_before_extraction(self) -> None:
        html = (
            "<main><p>Keep</p><div class='ad'>Buy now</div>"
            "<aside id='related'>Related</aside></main>"
        )
        text = extract_text(html, "main", [".ad", "#related"])
        assert canonicalize(text) == "Keep"

    def test_exclude_selectors_apply_without_selector(self) -> None:
        html = "<body><p>Keep</p><div class='banner'>Sale</div></body>"
        assert canonicalize(extract_text(html, None, [".banner"])) == "Keep"

    def test_adjacent_blocks_do_not_fuse_words(self) -> None:
        html = "<main><p>first</p><p>second</p></main>"
        assert canonicalize(extract_text(html, "main")) == "first second"


class TestCanonicalize:
    def test_collapses_whitespace(self) -> None:
        assert canonicalize("  a \n\t b   c  ") == "a b c"

    def test_removes_dates(self) -> None:
        assert canonicalize("Published 2024-01-01 by staff") == "Published by staff"

    def test_removes_times(self) -> None:
        assert canonicalize("Updated 9:05 and 10:30:00 today") == "Updated and today"

    def test_removes_timestamp(self) -> None:
        assert canonicalize("As of 2024-01-01 10:30:00 all good") == "As of all good"

    @pytest.mark.parametrize(
        "phrase",
        ["1 view", "25 views", "3 comment", "12 Comments", "1 like", "99 LIKES", "7views"],
    )
    def test_removes_counters(self, phrase: str) -> None:
        assert canonicalize(f"Post {phrase} end") == "Post end"

    def test_keeps_numbers_that_are_not_counters(self) -> None:
        assert canonicalize("Version 3 released with 12 fixes") == "Version 3 released with 12 fixes"

    def test_counter_needs_word_boundary(self) -> None:
        assert canonicalize("5 viewsonic monitors") == "5 viewsonic monitors"

    def test_removal_that_splices_a_new_match_is_repeated(self) -> None:
        # Removing the inner date joins "2024" with "-01-01" into a new date.
        assert canonicalize("x 20242024-01-01-01-01 y") == "x y"

    def test_empty_input(self) -> None:
        assert canonicalize("") == ""


class TestIdempotence:
    @pytest.mark.parametrize(
        "text",
        [
            "plain text",
            "  lots   of\n\nspace  ",
            "Published 2024-01-01 10:30:00 with 5 views",
            "1:1:2345",
            "20242024-01-01-01-01",
            "1 12 views views",
            "12:34:56:78 2024-01-01-01",
            " non-breaking space ",
        ],
    )
    def test_canonicalize_is_idempotent(self, text: str) -> None:
        once = canonicalize(text)
        assert canonicalize(once) == once

    def test_normalize_strips_volatile_fragments(self) -> None:
        html = "<main><p>Stock 12 likes</p><p>as of 2024-05-06 08:00</p></main>"
        assert normalize(html, "main") == "Stock as of"

    @pytest.mark.parametrize(
        "html",
        [
            "<p>Stock 12 likes</p><p>as of 2024-05-06 08:00</p>",
            "<p>&lt;b&gt;Price list</p>",
            "<p>Fish &amp;amp; chips</p>",
            "<p>a &lt; b &amp;&amp; c &gt; d</p>",
            "<div>&lt;script&gt;alert(1)&lt;/script&gt; 3 views</div>",
        ],
    )
    def test_normalize_output_is_a_fixed_point(self, html: str) -> None:
        once = normalize(html)
        assert normalize(once) == once

    def test_decoded_markup_is_kept_as_text(self) -> None:
        assert normalize("<p>&lt;b&gt;Price list</p>") == "&lt;b&gt;Price list"


class TestNormalize:
    def test_volatile_timestamp_does_not_change_output(self) -> None:
        before = "<main><p>Daily report</p><p>Generated 2024-01-01 10:30:00</p></main>"
        after = "<main><p>Daily report</p><p>Generated 2024-02-15 23:59:59</p></main>"
        assert normalize(before, "main") == normalize(after, "main")

    def test_substantive_edit_changes_output(self) -> None:
        before = "<main><p>Price: 10 EUR</p></main>"
        after = "<main><p>Price: 12 EUR</p></main>"
        assert normalize(before, "main") != normalize(after, "main")
