"""Unit tests for the tokenizer and normalizing filters."""

import pytest

from docsite_search.search.analyzers import (
    AnalyzerPipeline,
    DocsiteAnalyzer,
    LowercaseFilter,
    MinLengthFilter,
    RegexTokenizer,
    Token,
    get_analyzer,
    tokenize,
)


@pytest.mark.unit
class TestToken:
    def test_with_text_keeps_source_span(self):
        token = Token(text="Colormap", position=2, start_char=10, end_char=18)

        lowered = token.with_text("colormap")

        assert lowered.text == "colormap"
        assert (lowered.position, lowered.span) == (2, (10, 18))
        assert token.text == "Colormap"


@pytest.mark.unit
class TestRegexTokenizer:
    """Regex tokenizer should emit positions and char offsets."""

    def test_emits_tokens_with_offsets(self):
        tokens = list(RegexTokenizer()("Converting colors now"))

        assert [t.text for t in tokens] == ["Converting", "colors", "now"]
        assert [t.position for t in tokens] == [0, 1, 2]
        assert (tokens[1].start_char, tokens[1].end_char) == (11, 17)

    def test_underscore_separates_tokens(self):
        tokens = list(RegexTokenizer()("weighted_color_mean"))

        assert [t.text for t in tokens] == ["weighted", "color", "mean"]


@pytest.mark.unit
class TestFilters:
    def test_lowercase_filter_keeps_lowercase_tokens(self):
        raw = [Token(text="rgb", position=0, start_char=0, end_char=3)]

        assert list(LowercaseFilter()(raw))[0] is raw[0]

    def test_lowercase_filter_lowercases_mixed_case(self):
        raw = [Token(text="CIEDE2000", position=0, start_char=0, end_char=9)]

        assert [t.text for t in LowercaseFilter()(raw)] == ["ciede2000"]

    def test_lowercase_filter_resplits_combining_marks(self):
        raw = [Token(text="İstanbul", position=0, start_char=4, end_char=12)]

        pieces = list(LowercaseFilter()(raw))

        assert [piece.text for piece in pieces] == ["i", "stanbul"]
        assert all((piece.start_char, piece.end_char) == (4, 12) for piece in pieces)

    def test_min_length_filter(self):
        raw = [
            Token(text="a", position=0, start_char=0, end_char=1),
            Token(text="ab", position=1, start_char=2, end_char=4),
        ]

        assert [t.text for t in MinLengthFilter(2)(raw)] == ["ab"]

    def test_pipeline_renumbers_positions_after_filtering(self):
        pipeline = AnalyzerPipeline(RegexTokenizer(), [MinLengthFilter(3)])

        tokens = pipeline("a rgb b hsl")

        assert [(t.text, t.position) for t in tokens] == [("rgb", 0), ("hsl", 1)]


@pytest.mark.unit
class TestTokenize:
    def test_lowercases_and_strips_punctuation(self):
        assert tokenize("Colors.colormap(cname::String)") == ["colors", "colormap", "cname", "string"]

    def test_preserves_order_and_repetition(self):
        assert tokenize("color, Color; COLOR") == ["color", "color", "color"]

    def test_empty_and_punctuation_only_inputs(self):
        assert tokenize("") == []
        assert tokenize("  ...!?--__ ") == []

    def test_keeps_digits_and_unicode_letters(self):
        assert tokenize("RGB24 Größe ΔE") == ["rgb24", "größe", "δe"]

    @pytest.mark.parametrize(
        "text",
        [
            "Colors.jl allows you to convert from one colorspace to another",
            "weighted_color_mean(w1, c1, c2)",
            "İstanbul ΣΑΣ ﬁne",
            "julia> colorant\"#FF0000\"\nRGB{N0f8}(1.0, 0.0, 0.0)",
        ],
    )
    def test_idempotent_on_own_output(self, text):
        tokens = tokenize(text)

        assert tokenize(" ".join(tokens)) == tokens

    def test_analyzer_offsets_point_into_source(self):
        text = "Evaluate CIEDE2000 color difference."

        tokens = DocsiteAnalyzer()(text)

        assert [text[t.start_char : t.end_char] for t in tokens] == ["Evaluate", "CIEDE2000", "color", "difference"]

    def test_get_analyzer_is_shared(self):
        assert get_analyzer() is get_analyzer()
