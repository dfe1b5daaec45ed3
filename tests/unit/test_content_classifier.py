"""Unit tests for bt_moderation.domain.content_classifier."""

from src.bt_moderation.domain.content_classifier import (
    classify_content,
    is_spam,
    spam_pattern_hits,
)


class TestClassifyContent:
    def test_clean_text_is_not_flagged(self) -> None:
        verdict = classify_content("Vintage bicycle", "Blue frame, new tyres")
        assert verdict.flagged is False
        assert verdict.reasons == []

    def test_keyword_match_is_case_insensitive(self) -> None:
        verdict = classify_content("Will SELL quickly", "good shape")
        assert verdict.flagged is True
        assert "Contains suspicious keyword: sell" in verdict.reasons

    def test_keyword_matches_substrings(self) -> None:
        # "buy" inside "buyer" still counts
        verdict = classify_content("Looking for a buyer", None)
        assert "Contains suspicious keyword: buy" in verdict.reasons

    def test_dollar_sign_is_a_keyword(self) -> None:
        verdict = classify_content("Camera", "worth $200")
        assert "Contains suspicious keyword: $" in verdict.reasons

    def test_reasons_follow_table_order(self) -> None:
        verdict = classify_content("cash for scam", "")
        assert verdict.reasons == [
            "Contains suspicious keyword: cash",
            "Contains suspicious keyword: scam",
        ]

    def test_spam_pattern_adds_reason(self) -> None:
        verdict = classify_content("Lamp", "click here for details")
        assert verdict.flagged is True
        assert "Contains spam-like patterns: call to action" in verdict.reasons

    def test_description_none_is_accepted(self) -> None:
        assert classify_content("Bookshelf", None).flagged is False

    def test_deterministic(self) -> None:
        first = classify_content("FREE MONEY casino", "aaaaaa")
        second = classify_content("FREE MONEY casino", "aaaaaa")
        assert first == second


class TestSpamPatterns:
    def test_repeated_characters(self) -> None:
        assert spam_pattern_hits("heyyyyy") == ["repeated characters"]

    def test_four_repeats_is_not_spam(self) -> None:
        assert is_spam("heyyyy") is False

    def test_uppercase_run_needs_original_case(self) -> None:
        assert is_spam("ABCDEFGHIJ") is True
        assert is_spam("abcdefghij") is False

    def test_phrases_match_whole_words_only(self) -> None:
        assert is_spam("the lottery results") is True
        assert is_spam("lotteryticket") is False

    def test_get_rich_phrase(self) -> None:
        assert "get-rich phrase" in spam_pattern_hits("Easy Money tonight")

    def test_plain_message_is_not_spam(self) -> None:
        assert is_spam("Is the guitar still available?") is False
