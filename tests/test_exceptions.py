"""Tests for the engine exception hierarchy."""

import pytest

from storybook.exceptions import (
    AnalyzerError,
    AnalyzerExecutionError,
    ConfigurationError,
    StorybookError,
    ThoughtSequenceError,
    ValidationError,
    check_config_keys,
)


class TestStorybookError:
    """Test message formatting."""

    def test_message_only(self):
        error = StorybookError("Something broke")
        assert error.format_error() == "Error: Something broke"
        assert str(error) == "Error: Something broke"

    def test_hint_and_details(self):
        error = StorybookError(
            "Bad profile", hint="Check the age", details={"age": "too low"}
        )
        assert error.format_error() == (
            "Error: Bad profile\nHint: Check the age\nDetails:\n  age: too low"
        )

    @pytest.mark.parametrize(
        "error_class",
        [ConfigurationError, ValidationError, AnalyzerError, ThoughtSequenceError],
    )
    def test_hierarchy(self, error_class):
        assert issubclass(error_class, StorybookError)


class TestAnalyzerExecutionError:
    """Test analyzer failure details."""

    def test_records_analyzer_and_cause(self):
        cause = RuntimeError("boom")
        error = AnalyzerExecutionError("Failed", analyzer="events", cause=cause)
        assert isinstance(error, AnalyzerError)
        assert error.analyzer == "events"
        assert error.cause is cause
        assert error.details == {"analyzer": "events", "cause": "RuntimeError: boom"}

    def test_extra_details(self):
        error = AnalyzerExecutionError(
            "Failed", analyzer="dialogue", details={"paragraph": 3}
        )
        assert error.details == {"analyzer": "dialogue", "paragraph": 3}


class TestCheckConfigKeys:
    """Test detection of misspelled configuration keys."""

    @pytest.mark.parametrize(
        "wrong,right",
        [
            ("delimiter", "scene_delimiter"),
            ("window", "repetition_window"),
            ("loglevel", "log_level"),
            ("spacy_model", "nlp_model"),
        ],
    )
    def test_known_mistakes(self, wrong, right):
        with pytest.raises(ConfigurationError) as exc_info:
            check_config_keys({wrong: 1})
        assert exc_info.value.details == {"found": wrong, "expected": right}

    def test_correct_keys_pass(self):
        check_config_keys({"scene_delimiter": "***", "repetition_window": 40})

    def test_both_keys_present(self):
        check_config_keys({"window": 10, "repetition_window": 40})
