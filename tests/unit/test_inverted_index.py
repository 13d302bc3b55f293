"""Unit tests for the inverted index builder."""

import pytest

from docsite_search.search.inverted_index import build_inverted_index
from docsite_search.search.loader import load_index
from docsite_search.search.models import IndexField, Posting


@pytest.mark.unit
class TestBuildInvertedIndex:
    def test_counts_frequency_per_field(self):
        index = load_index(
            [
                {
                    "location": "a#1",
                    "page": "Color Scales",
                    "title": "Color",
                    "category": "section",
                    "text": "color color colour",
                }
            ]
        )

        inverted = build_inverted_index(index)
        postings = inverted.lookup("color")

        assert postings.for_field(IndexField.TITLE) == (Posting(0, IndexField.TITLE, 1),)
        assert postings.for_field(IndexField.PAGE) == (Posting(0, IndexField.PAGE, 1),)
        assert postings.for_field(IndexField.TEXT) == (Posting(0, IndexField.TEXT, 2),)
        assert postings.for_field(IndexField.CATEGORY) == ()
        assert inverted.lookup("section").for_field(IndexField.CATEGORY) == (Posting(0, IndexField.CATEGORY, 1),)

    def test_postings_follow_index_order(self):
        index = load_index(
            [
                {"location": f"p#{i}", "page": "P", "title": title, "category": "function", "text": ""}
                for i, title in enumerate(["zeta shared", "alpha", "shared beta", "shared"])
            ]
        )

        inverted = build_inverted_index(index)

        assert [p.entry_index for p in inverted.lookup("shared")] == [0, 2, 3]
        assert inverted.lookup("shared").entry_count == 3

    def test_iteration_merges_fields_by_entry_then_field(self, color_inverted):
        merged = list(color_inverted.lookup("colormap"))

        assert [(p.entry_index, p.field) for p in merged] == [(0, IndexField.TITLE), (0, IndexField.TEXT)]

    def test_vocabulary_sorted_and_unique(self, color_inverted):
        vocabulary = color_inverted.vocabulary

        assert list(vocabulary) == sorted(set(vocabulary))
        assert "ciede2000" in color_inverted
        assert "color" in color_inverted
        assert "Color" not in color_inverted

    def test_prefix_matches(self, color_inverted):
        assert list(color_inverted.prefix_matches("colo")) == ["color", "colordiff", "colormap"]
        assert list(color_inverted.prefix_matches("color")) == ["color", "colordiff", "colormap"]
        assert list(color_inverted.prefix_matches("zzz")) == []
        assert list(color_inverted.prefix_matches("")) == []

    def test_total_tokens(self, color_index, color_inverted):
        assert color_inverted.total_tokens == sum(
            len(entry.field_value(field).split()) for entry in color_index for field in IndexField
        )

    def test_empty_index(self):
        inverted = build_inverted_index(load_index([]))

        assert len(inverted) == 0
        assert inverted.lookup("anything") is None

    def test_postings_are_read_only(self, color_inverted):
        with pytest.raises(TypeError):
            color_inverted.postings["new"] = None  # type: ignore[index]
