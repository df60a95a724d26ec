"""Tests for upstream payload validation."""

import sys

import pytest

from copilot_compass.reports.schemas import (
    format_validation_errors,
    summarize_validation_errors,
    validate_metrics_response,
    validate_single_day_metrics,
)


# ---------------------------------------------------------------------------
# validate_metrics_response: success
# ---------------------------------------------------------------------------

class TestValidResponses:

    def test_complete_response(self, complete_response):
        result = validate_metrics_response(complete_response)

        assert result.success is True
        assert result.errors == []
        assert result.warnings == []
        assert len(result.data) == 2
        assert result.data[0]["date"] == "2026-01-15"

    def test_minimal_response_gets_defaults(self):
        result = validate_metrics_response([{"date": "2026-01-15"}])

        assert result.success is True
        day = result.data[0]
        assert day["total_active_users"] == 0
        assert day["total_engaged_users"] == 0
        assert day["copilot_ide_code_completions"] is None

    def test_boolean_defaults_to_false(self):
        payload = [{
            "date": "2026-01-15",
            "copilot_dotcom_chat": {"models": [{"name": "gpt-4o"}]},
        }]

        result = validate_metrics_response(payload)

        assert result.data[0]["copilot_dotcom_chat"]["models"][0]["is_custom_model"] is False

    def test_unknown_fields_pass_through(self):
        payload = [{
            "date": "2026-01-15",
            "total_active_users": 10,
            "brand_new_metric": {"value": 1},
            "copilot_ide_code_completions": {
                "languages": [{"name": "Go", "experimental_flag": True}],
            },
        }]

        result = validate_metrics_response(payload)

        assert result.success is True
        assert result.data[0]["brand_new_metric"] == {"value": 1}
        assert result.data[0]["copilot_ide_code_completions"]["languages"][0]["experimental_flag"] is True

    def test_custom_model_training_date_may_be_null(self):
        payload = [{
            "date": "2026-01-15",
            "copilot_ide_chat": {"editors": [{
                "name": "VS Code",
                "models": [{
                    "name": "custom",
                    "is_custom_model": True,
                    "custom_model_training_date": None,
                    "total_chats": 3,
                }],
            }]},
        }]

        assert validate_metrics_response(payload).success is True

    def test_float_counters_are_accepted(self):
        result = validate_metrics_response([{"date": "2026-01-15", "total_active_users": 10.0}])

        assert result.success is True


# ---------------------------------------------------------------------------
# validate_metrics_response: warnings
# ---------------------------------------------------------------------------

class TestWarnings:

    def test_empty_array(self):
        result = validate_metrics_response([])

        assert result.success is True
        assert result.data == []
        assert result.warnings == ["API returned empty metrics array - date range may have no data"]

    def test_some_zero_activity_days(self):
        payload = [
            {"date": "2026-01-01", "total_active_users": 0},
            {"date": "2026-01-02", "total_active_users": 0},
            {"date": "2026-01-03", "total_active_users": 120},
        ]

        result = validate_metrics_response(payload)

        assert result.success is True
        assert result.warnings == ["2 day(s) have zero active users"]

    def test_all_zero_days_do_not_warn(self):
        payload = [
            {"date": "2026-01-01", "total_active_users": 0},
            {"date": "2026-01-02"},
        ]

        assert validate_metrics_response(payload).warnings == []

    def test_warnings_do_not_change_data(self):
        payload = [
            {"date": "2026-01-01", "total_active_users": 0},
            {"date": "2026-01-02", "total_active_users": 5},
        ]

        result = validate_metrics_response(payload)

        assert [d["total_active_users"] for d in result.data] == [0, 5]


# ---------------------------------------------------------------------------
# validate_metrics_response: failures
# ---------------------------------------------------------------------------

class TestInvalidResponses:

    def test_string_number_and_missing_date(self):
        result = validate_metrics_response([{"total_active_users": "100"}])

        assert result.success is False
        assert result.data is None
        messages = format_validation_errors(result.errors)
        assert any("date" in message for message in messages)
        assert "0.total_active_users: Expected number, received string" in messages

    @pytest.mark.parametrize("payload", [{"date": "2026-01-15"}, "[]", None, 42])
    def test_non_array_top_level(self, payload):
        result = validate_metrics_response(payload)

        assert result.success is False
        assert format_validation_errors(result.errors)[0].startswith("(root): Expected array")

    def test_boolean_is_not_a_number(self):
        result = validate_metrics_response([{"date": "2026-01-15", "total_active_users": True}])

        assert result.success is False
        assert format_validation_errors(result.errors) == [
            "0.total_active_users: Expected number, received boolean"
        ]

    def test_null_counter_is_rejected(self):
        result = validate_metrics_response([{"date": "2026-01-15", "total_engaged_users": None}])

        assert result.success is False

    def test_nested_error_path(self):
        payload = [{
            "date": "2026-01-15",
            "copilot_ide_code_completions": {
                "languages": [{"name": "Go", "total_code_suggestions": "many"}],
            },
        }]

        result = validate_metrics_response(payload)

        assert format_validation_errors(result.errors) == [
            "0.copilot_ide_code_completions.languages.0.total_code_suggestions: "
            "Expected number, received string"
        ]

    def test_non_string_date(self):
        result = validate_metrics_response([{"date": 20260115}])

        assert result.success is False
        assert result.errors[0]["loc"] == (0, "date")

    def test_integer_past_float_range(self):
        result = validate_metrics_response([{"date": "2026-01-15", "total_active_users": 10**400}])

        assert result.success is False
        assert format_validation_errors(result.errors) == [
            "0.total_active_users: Expected finite number, received out-of-range integer"
        ]

    def test_largest_float_sized_integer_is_accepted(self):
        largest = int(sys.float_info.max)

        result = validate_metrics_response([{"date": "2026-01-15", "total_active_users": largest}])

        assert result.success is True
        assert result.data[0]["total_active_users"] == largest


# ---------------------------------------------------------------------------
# validate_single_day_metrics
# ---------------------------------------------------------------------------

class TestSingleDay:

    def test_valid_day(self, complete_response):
        result = validate_single_day_metrics(complete_response[0])

        assert result.success is True
        assert result.data["total_active_users"] == 150
        assert result.warnings == []

    def test_zero_activity_day_has_no_warning(self):
        result = validate_single_day_metrics({"date": "2026-01-15", "total_active_users": 0})

        assert result.success is True
        assert result.warnings == []

    def test_invalid_day(self):
        result = validate_single_day_metrics({"total_active_users": "100"})

        assert result.success is False
        paths = [".".join(str(p) for p in err["loc"]) for err in result.errors]
        assert "date" in paths


# ---------------------------------------------------------------------------
# Error formatting
# ---------------------------------------------------------------------------

class TestErrorFormatting:

    def test_root_path(self):
        errors = [{"loc": (), "msg": "Expected array, received object", "type": "list_type"}]

        assert format_validation_errors(errors) == ["(root): Expected array, received object"]

    def test_summary_limits_to_three(self):
        errors = [{"loc": (i, "date"), "msg": "Field required", "type": "missing"} for i in range(5)]

        summary = summarize_validation_errors(errors)

        assert summary == (
            "0.date: Field required; 1.date: Field required; 2.date: Field required"
            " (and 2 more errors)"
        )

    def test_summary_without_overflow(self):
        errors = [{"loc": (0, "date"), "msg": "Field required", "type": "missing"}]

        assert summarize_validation_errors(errors) == "0.date: Field required"
