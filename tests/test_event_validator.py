"""
Unit tests for the event submission validator.

Covers the per-field normalizers and the aggregating ``validate_event``:
- text sanitization and length limits
- date and time normalization
- mode, array and image URL checks
- error aggregation and the event/errors invariant
- idempotence on already sanitized values
"""

import pytest

from dev_events_api.app.schemas.event import SanitizedEvent
from dev_events_api.app.services.event_validator import (
    TEXT_FIELD_LIMITS,
    ValidationResult,
    ensure_secure_url,
    normalize_date,
    normalize_time,
    parse_string_array,
    sanitize_plain_text,
    to_raw_submission,
    validate_event,
)


class TestSanitizePlainText:
    """Tests for text field cleanup."""

    def test_strips_brackets_and_whitespace(self):
        assert sanitize_plain_text("  <b>Hi</b>  ", 100) == "bHi/b"

    def test_brackets_removed_before_truncation(self):
        assert sanitize_plain_text("<<<<abcdef", 4) == "abcd"

    def test_truncates_to_limit(self):
        assert sanitize_plain_text("x" * 150, 100) == "x" * 100

    def test_only_brackets_becomes_empty(self):
        assert sanitize_plain_text(" <> ", 100) == ""


class TestNormalizeDate:
    """Tests for date normalization."""

    def test_iso_date_unchanged(self):
        assert normalize_date("2024-03-15") == "2024-03-15"

    def test_datetime_drops_time_of_day(self):
        assert normalize_date("2024-03-15T18:45:00") == "2024-03-15"

    def test_offset_converted_to_utc(self):
        assert normalize_date("2024-03-15T23:30:00-05:00") == "2024-03-16"

    def test_zulu_suffix(self):
        assert normalize_date("2024-03-15T10:00:00Z") == "2024-03-15"

    @pytest.mark.parametrize(
        "value",
        ["March 15, 2024", "Mar 15 2024", "15 March 2024", "03/15/2024", "2024/03/15"],
    )
    def test_common_formats(self, value):
        assert normalize_date(value) == "2024-03-15"

    @pytest.mark.parametrize("value", ["not-a-date", "", "2024-02-30", "13/45/2024", "Smarch 3, 2024"])
    def test_invalid_dates(self, value):
        assert normalize_date(value) is None

    @pytest.mark.parametrize("value", ["0001-01-01T00:00:00+01:00", "9999-12-31T23:00:00-05:00"])
    def test_offset_outside_calendar_range(self, value):
        assert normalize_date(value) is None


class TestNormalizeTime:
    """Tests for 12/24-hour time normalization."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("2:30 PM", "14:30"),
            ("12:15 AM", "00:15"),
            ("12:00 PM", "12:00"),
            ("9:05am", "09:05"),
            ("09:05", "09:05"),
            ("23:59", "23:59"),
            (" 7:00 pm ", "19:00"),
        ],
    )
    def test_valid_times(self, value, expected):
        assert normalize_time(value) == expected

    @pytest.mark.parametrize("value", ["25:00", "10:60", "noon", "1030", "10:5", "11:30 PM extra", "13:00 PM"])
    def test_invalid_times(self, value):
        assert normalize_time(value) is None


class TestParseStringArray:
    """Tests for JSON/comma separated list parsing."""

    def test_json_list(self):
        assert parse_string_array('["AI","Cloud"]') == ["AI", "Cloud"]

    def test_comma_fallback(self):
        assert parse_string_array("AI,Cloud") == ["AI", "Cloud"]

    def test_single_item_fallback(self):
        assert parse_string_array("Keynote") == ["Keynote"]

    def test_empty_json_list_rejected(self):
        assert parse_string_array("[]") is None

    def test_json_non_list_rejected(self):
        assert parse_string_array('{"a": 1}') is None
        assert parse_string_array('"AI"') is None

    @pytest.mark.parametrize("value", ["[" * 100000, "[" * 100000 + "]" * 100000])
    def test_deeply_nested_json_rejected(self, value):
        assert parse_string_array(value) is None

    def test_items_cleaned(self):
        assert parse_string_array('[" <AI> ", "", 3, null, "Cloud"]') == ["AI", "Cloud"]

    def test_blank_comma_items_dropped(self):
        assert parse_string_array(" , AI , ,Cloud") == ["AI", "Cloud"]


class TestEnsureSecureUrl:
    """Tests for HTTPS image URL checks."""

    def test_https_unchanged(self):
        assert ensure_secure_url("https://example.com/a.png") == "https://example.com/a.png"

    def test_http_rejected(self):
        assert ensure_secure_url("http://example.com/a.png") is None

    @pytest.mark.parametrize("value", ["", "example.com/a.png", "https://", "https://exa mple.com", "https://example.com:99999/"])
    def test_malformed_rejected(self, value):
        assert ensure_secure_url(value) is None

    def test_canonical_form(self):
        assert ensure_secure_url("HTTPS://Example.COM") == "https://example.com/"
        assert ensure_secure_url("https://example.com:443/a") == "https://example.com/a"
        assert ensure_secure_url("https://example.com:8443/a?x=1") == "https://example.com:8443/a?x=1"


class TestValidateEvent:
    """Tests for the aggregating validator."""

    def test_valid_submission(self, make_submission):
        result = validate_event(make_submission(title="  <b>Hi</b>  "))

        assert result.is_valid
        assert result.errors == []
        event = result.event
        assert event.title == "bHi/b"
        assert event.date == "2024-03-15"
        assert event.time == "14:30"
        assert event.mode == "offline"
        assert event.agenda == ["Opening keynote", "Hacking", "Demos"]
        assert event.tags == ["Python", "AI"]
        assert event.image == "https://res.cloudinary.com/demo/image/upload/hackathon.png"

    def test_empty_mapping_reports_every_field(self):
        result = validate_event({})

        assert result.event is None
        expected_fields = list(TEXT_FIELD_LIMITS) + ["date", "time", "mode", "agenda", "tags", "image"]
        assert result.errors == [f"{name} is required" for name in expected_fields]

    def test_missing_fields_each_reported_once(self, make_submission):
        result = validate_event(make_submission(venue=None, tags=None))

        assert not result.is_valid
        assert result.errors == ["venue is required", "tags is required"]

    def test_non_string_value_is_required_error(self, make_submission):
        result = validate_event(make_submission(image=object()))

        assert result.errors == ["image is required"]

    def test_errors_accumulate(self, make_submission):
        result = validate_event(
            make_submission(
                title="   ",
                date="not-a-date",
                time="25:00",
                mode="in-person",
                agenda="[]",
                tags="",
                image="http://example.com/a.png",
            )
        )

        assert result.event is None
        assert result.errors == [
            "title cannot be empty",
            "date must be a valid date",
            "time must be in HH:MM or HH:MM AM/PM format",
            "mode must be one of: online, offline, hybrid",
            "agenda must be an array of strings with at least one item",
            "tags must be an array of strings with at least one item",
            "image must be a valid HTTPS URL",
        ]

    @pytest.mark.parametrize("name,max_length", list(TEXT_FIELD_LIMITS.items()))
    def test_value_at_limit_kept_whole(self, make_submission, name, max_length):
        value = "a" * max_length

        result = validate_event(make_submission(**{name: value}))

        assert getattr(result.event, name) == value

    @pytest.mark.parametrize("name,max_length", list(TEXT_FIELD_LIMITS.items()))
    def test_value_over_limit_truncated(self, make_submission, name, max_length):
        result = validate_event(make_submission(**{name: "a" * max_length + "b"}))

        assert getattr(result.event, name) == "a" * max_length

    @pytest.mark.parametrize(
        "field_name,value,message",
        [
            ("tags", "[" * 100000, "tags must be an array of strings with at least one item"),
            ("agenda", "[" * 100000, "agenda must be an array of strings with at least one item"),
            ("date", "0001-01-01T00:00:00+01:00", "date must be a valid date"),
            ("date", "9999-12-31T23:00:00-05:00", "date must be a valid date"),
            ("date", "9" * 5000, "date must be a valid date"),
            ("time", "9" * 5000 + ":00", "time must be in HH:MM or HH:MM AM/PM format"),
            ("image", "https://[::1", "image must be a valid HTTPS URL"),
        ],
    )
    def test_malformed_input_reported_not_raised(self, make_submission, field_name, value, message):
        result = validate_event(make_submission(**{field_name: value}))

        assert result.event is None
        assert result.errors == [message]

    def test_sanitized_values_are_fixed_point(self, make_submission):
        first = validate_event(make_submission(title="  <i>Edge</i> case " + "y" * 120, tags="AI, <Cloud>"))
        second = validate_event(to_raw_submission(first.event))

        assert second.is_valid
        assert second.event == first.event


class TestValidationResult:
    """The result holds either an event or errors."""

    def test_requires_one_side(self):
        with pytest.raises(ValueError, match="exactly one of event or errors"):
            ValidationResult()

    def test_rejects_both(self, make_submission):
        event = validate_event(make_submission()).event
        with pytest.raises(ValueError, match="exactly one of event or errors"):
            ValidationResult(event=event, errors=["title is required"])

    def test_to_raw_submission_encodes_lists(self, make_submission):
        event = validate_event(make_submission()).event
        raw = to_raw_submission(event)

        assert raw["tags"] == '["Python", "AI"]'
        assert set(raw) == set(SanitizedEvent.model_fields)
