"""Unit tests for email content normalization."""

import pytest

from src.analyzer import (
    ContentValidationError,
    clean_email_content,
    format_email_for_analysis,
    validate_prompt_input,
)
from tests.analysis_test_helpers import make_email


class TestCleanEmailContent:
    """Tests for clean_email_content()."""

    def test_collapses_whitespace(self):
        assert clean_email_content("Hello\n\n   world\t!") == "Hello world !"

    def test_strips_dash_signature(self):
        assert clean_email_content("See you soon -- John\nCEO, Acme") == "See you soon"

    def test_strips_mobile_signature(self):
        assert clean_email_content("On my way. Sent from my iPhone") == "On my way."

    def test_strips_best_regards(self):
        assert clean_email_content("Please review. Best regards, Ann") == "Please review."

    def test_signature_match_is_case_insensitive(self):
        assert clean_email_content("Thanks! BEST REGARDS Bob") == "Thanks!"

    def test_truncates_with_marker(self):
        cleaned = clean_email_content("a" * 50, max_length=10)
        assert cleaned == "a" * 10 + "..."

    def test_exact_length_not_truncated(self):
        assert clean_email_content("a" * 10, max_length=10) == "a" * 10

    def test_empty_string(self):
        assert clean_email_content("") == ""

    def test_non_string_rejected(self):
        with pytest.raises(ContentValidationError) as exc_info:
            clean_email_content(123)
        assert exc_info.value.kind == "content_validation"


class TestFormatEmailForAnalysis:
    """Tests for format_email_for_analysis()."""

    def test_format(self):
        email = make_email(subject="Hi", sender="Ann <ann@example.com>", body="Call me")
        assert format_email_for_analysis(email) == (
            "Subject: Hi\nFrom: Ann <ann@example.com>\nContent: Call me"
        )

    def test_missing_fields_use_placeholders(self):
        email = make_email(subject="", sender=None, body=None)
        assert format_email_for_analysis(email) == (
            "Subject: No Subject\nFrom: Unknown Sender\nContent: "
        )

    def test_body_is_cleaned_and_truncated(self):
        email = make_email(body="word " * 100)
        content = format_email_for_analysis(email, max_length=20)
        assert content.endswith("Content: " + ("word " * 4).strip() + " ...")

    def test_non_string_subject_rejected(self):
        with pytest.raises(ContentValidationError):
            format_email_for_analysis(make_email(subject=42))

    def test_non_string_body_rejected(self):
        with pytest.raises(ContentValidationError):
            format_email_for_analysis(make_email(body=["not", "text"]))

    def test_oversize_prompt_rejected(self):
        email = make_email(subject="s" * 200)
        with pytest.raises(ContentValidationError):
            format_email_for_analysis(email, max_prompt_length=100)


class TestValidatePromptInput:
    """Tests for validate_prompt_input()."""

    def test_valid(self):
        assert validate_prompt_input("hello") == "hello"

    def test_blank_rejected(self):
        with pytest.raises(ContentValidationError):
            validate_prompt_input("   ")

    def test_non_string_rejected(self):
        with pytest.raises(ContentValidationError):
            validate_prompt_input(None)

    def test_too_long_rejected(self):
        with pytest.raises(ContentValidationError) as exc_info:
            validate_prompt_input("x" * 11, max_length=10)
        assert exc_info.value.to_dict()["message"] == "Prompt input too long: maximum 10 characters"
