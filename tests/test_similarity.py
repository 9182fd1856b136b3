"""Tests for description similarity scoring."""

import pytest

from bank_reconciler.matching.similarity import string_similarity


class TestStringSimilarity:
    """Tests for string_similarity."""

    def test_identical_text_counts_as_containment(self) -> None:
        """Test that identical descriptions score 0.8, ignoring case and whitespace."""
        assert string_similarity("  Office Rent ", "office rent") == 0.8

    def test_both_empty(self) -> None:
        assert string_similarity("", None) == 1.0
        assert string_similarity("   ", "") == 1.0

    def test_empty_against_text(self) -> None:
        assert string_similarity("", "Rent") == 0.8

    def test_containment(self) -> None:
        """Test that one description inside the other scores 0.8."""
        assert string_similarity("Rent", "Rent February 2024") == 0.8
        assert string_similarity("Rent February 2024", "rent") == 0.8

    def test_word_overlap(self) -> None:
        """Test the 2 * common / (len a + len b) ratio."""
        assert string_similarity("acme corp payment", "acme corp refund") == pytest.approx(4 / 6)

    def test_word_overlap_counts_repeated_words_in_first(self) -> None:
        # "pay" appears twice in the first string and once in the second
        score = string_similarity("pay pay bill", "pay invoice now")
        assert score == pytest.approx(4 / 6)

    def test_no_overlap(self) -> None:
        assert string_similarity("coffee shop", "electric utility") == 0.0

    def test_result_is_capped_at_one(self) -> None:
        assert string_similarity("a a a b", "c a") <= 1.0
