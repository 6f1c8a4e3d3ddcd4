"""Tests for OCR text post-processing."""

from modules.ocr.text import (
    GARBLED_TEXT_MESSAGE,
    MAX_FILTERED_LINES,
    calculate_confidence,
    count_words,
    filter_text,
    is_garbled,
)


class TestFilterText:
    def test_drops_social_media_noise(self):
        """Counters, handles, menu items and symbol-only lines are removed."""
        text = (
            "Great photo of the sunset\n"
            "12k likes\n"
            "@someuser\n"
            "Manage\n"
            "\n"
            "Second line here\n"
            "!"
        )
        assert filter_text(text) == "Great photo of the sunset\nSecond line here"

    def test_keeps_at_most_twenty_lines(self):
        text = "\n".join(f"Line number {i} text" for i in range(30))
        assert len(filter_text(text).splitlines()) == MAX_FILTERED_LINES

    def test_garbled_text_replaced(self):
        """Decorative symbol soup is replaced with guidance for the user."""
        text = "¥€£™®©§ ¶†"
        assert is_garbled(text) is True
        assert filter_text(text) == GARBLED_TEXT_MESSAGE

    def test_real_text_not_garbled(self):
        assert is_garbled("This is a perfectly normal sentence") is False


class TestCalculateConfidence:
    def test_empty_text(self):
        assert calculate_confidence("") == 0

    def test_bounds(self):
        """Confidence is always clamped into [50, 99]."""
        for text in ("x", "%%% ### @@@", "Hello", "word " * 100):
            assert 50 <= calculate_confidence(text) <= 99

    def test_clean_prose_scores_higher_than_noise(self):
        prose = (
            "The quick brown fox jumps over the lazy dog. "
            "Another sentence follows with more words in it. "
            "Finally a third sentence closes the paragraph."
        )
        noise = "%% $$ ## @@ !! ** ^^ && (( ))"
        assert calculate_confidence(prose) > calculate_confidence(noise)

    def test_count_words(self):
        assert count_words("one two\nthree  four") == 4
        assert count_words("") == 0
