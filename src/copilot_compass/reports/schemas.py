"""Validation schemas for the GitHub Copilot metrics API.

The upstream payload is untrusted. These models check only the fields the
aggregation pipeline reads; every model allows extra keys so new fields
added by GitHub pass through untouched. Numeric fields are never coerced:
``"100"`` and ``true`` are rejected where a number is expected.

Validated records are returned as plain dicts (``model_dump()``), so the
aggregator works on the same open mappings whether validation ran or not.
"""

import math
import sys
from dataclasses import dataclass, field
from typing import Annotated, Any, Dict, List, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    PlainValidator,
    StrictBool,
    StrictStr,
    TypeAdapter,
    ValidationError,
)
from pydantic_core import PydanticCustomError

MAX_SUMMARIZED_ERRORS = 3

_JSON_TYPE_NAMES = {
    str: "string",
    bool: "boolean",
    int: "number",
    float: "number",
    list: "array",
    dict: "object",
    type(None): "null",
}


def _json_type(value: Any) -> str:
    return _JSON_TYPE_NAMES.get(type(value), type(value).__name__)


def _strict_number(value: Any) -> Union[int, float]:
    # bool is a subclass of int in Python but not a number in JSON
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PydanticCustomError(
            "number_type",
            "Expected number, received {received}",
            {"received": _json_type(value)},
        )
    if isinstance(value, float) and not math.isfinite(value):
        raise PydanticCustomError("finite_number", "Expected finite number, received {value}", {"value": str(value)})
    # JSON integers are unbounded; anything past the float range cannot take part in a rate
    if isinstance(value, int) and abs(value) > sys.float_info.max:
        raise PydanticCustomError("finite_number", "Expected finite number, received out-of-range integer")
    return value


Number = Annotated[Union[int, float], PlainValidator(_strict_number)]


class PassthroughModel(BaseModel):
    """Base for upstream records: unknown fields are kept, never rejected."""

    model_config = ConfigDict(extra="allow")


# =============================================================================
# Code completions
# =============================================================================

class LanguageMetrics(PassthroughModel):
    name: StrictStr
    total_engaged_users: Number = 0
    total_code_suggestions: Number = 0
    total_code_acceptances: Number = 0
    total_code_lines_suggested: Number = 0
    total_code_lines_accepted: Number = 0


class ModelMetrics(PassthroughModel):
    name: StrictStr
    is_custom_model: StrictBool = False
    custom_model_training_date: Optional[StrictStr] = None
    total_engaged_users: Number = 0
    languages: Optional[List[LanguageMetrics]] = None
    total_code_suggestions: Optional[Number] = None
    total_code_acceptances: Optional[Number] = None
    total_code_lines_suggested: Optional[Number] = None
    total_code_lines_accepted: Optional[Number] = None


class EditorMetrics(PassthroughModel):
    name: StrictStr
    total_engaged_users: Number = 0
    models: Optional[List[ModelMetrics]] = None


class IdeCodeCompletions(PassthroughModel):
    total_engaged_users: Number = 0
    languages: Optional[List[LanguageMetrics]] = None
    editors: Optional[List[EditorMetrics]] = None
    models: Optional[List[ModelMetrics]] = None


# =============================================================================
# Chat
# =============================================================================

class ChatModelMetrics(PassthroughModel):
    name: StrictStr
    is_custom_model: StrictBool = False
    custom_model_training_date: Optional[StrictStr] = None
    total_engaged_users: Number = 0
    total_chats: Number = 0
    total_chat_insertion_events: Number = 0
    total_chat_copy_events: Number = 0


class EditorChatMetrics(PassthroughModel):
    name: StrictStr
    total_engaged_users: Number = 0
    models: Optional[List[ChatModelMetrics]] = None


class IdeChatMetrics(PassthroughModel):
    total_engaged_users: Number = 0
    editors: Optional[List[EditorChatMetrics]] = None


class DotcomChatMetrics(PassthroughModel):
    total_engaged_users: Number = 0
    models: Optional[List[ChatModelMetrics]] = None


# =============================================================================
# Pull requests
# =============================================================================

class PullRequestModelMetrics(PassthroughModel):
    name: StrictStr
    is_custom_model: StrictBool = False
    custom_model_training_date: Optional[StrictStr] = None
    total_pr_summaries_created: Number = 0
    total_engaged_users: Number = 0


class RepositoryMetrics(PassthroughModel):
    name: StrictStr
    total_engaged_users: Number = 0
    models: Optional[List[PullRequestModelMetrics]] = None


class PullRequestMetrics(PassthroughModel):
    total_engaged_users: Number = 0
    repositories: Optional[List[RepositoryMetrics]] = None


# =============================================================================
# Daily record
# =============================================================================

class CopilotUsageMetrics(PassthroughModel):
    """One day of metrics as returned by the GitHub API."""

    date: StrictStr
    total_active_users: Number = 0
    total_engaged_users: Number = 0
    copilot_ide_code_completions: Optional[IdeCodeCompletions] = None
    copilot_ide_chat: Optional[IdeChatMetrics] = None
    copilot_dotcom_chat: Optional[DotcomChatMetrics] = None
    copilot_dotcom_pull_requests: Optional[PullRequestMetrics] = None


_RESPONSE_ADAPTER = TypeAdapter(List[CopilotUsageMetrics])


# =============================================================================
# Validation entry points
# =============================================================================

@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating an upstream payload.

    On success ``data`` holds the validated record(s) as dicts with defaults
    applied; on failure ``errors`` holds pydantic-style error dicts
    (``loc``, ``msg``, ``type``).
    """

    success: bool
    data: Any = None
    errors: List[Dict[str, Any]] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def _error_list(exc: ValidationError) -> List[Dict[str, Any]]:
    return [
        {"loc": tuple(err["loc"]), "msg": err["msg"], "type": err["type"]}
        for err in exc.errors(include_url=False)
    ]


def validate_metrics_response(data: Any) -> ValidationResult:
    """Validate the API response for a date range (a list of daily records).

    Never raises. Returns warnings for an empty list and for a mix of
    zero-activity and active days; warnings do not affect ``data``.
    """
    if not isinstance(data, list):
        return ValidationResult(
            success=False,
            errors=[{
                "loc": (),
                "msg": f"Expected array, received {_json_type(data)}",
                "type": "list_type",
            }],
        )

    try:
        records = _RESPONSE_ADAPTER.validate_python(data)
    except ValidationError as exc:
        return ValidationResult(success=False, errors=_error_list(exc))

    days = [record.model_dump() for record in records]

    warnings: List[str] = []
    if not days:
        warnings.append("API returned empty metrics array - date range may have no data")

    zero_days = sum(1 for day in days if day["total_active_users"] == 0)
    if 0 < zero_days < len(days):
        warnings.append(f"{zero_days} day(s) have zero active users")

    return ValidationResult(success=True, data=days, warnings=warnings)


def validate_single_day_metrics(data: Any) -> ValidationResult:
    """Validate a single day's record, for incremental or streaming use."""
    try:
        record = CopilotUsageMetrics.model_validate(data)
    except ValidationError as exc:
        return ValidationResult(success=False, errors=_error_list(exc))
    return ValidationResult(success=True, data=record.model_dump())


def format_validation_errors(errors: List[Dict[str, Any]]) -> List[str]:
    """Format error dicts as "<path>: <message>" strings.

    The path joins locations with dots, e.g. "0.total_active_users".
    """
    messages = []
    for err in errors:
        path = ".".join(str(part) for part in err.get("loc", ())) or "(root)"
        messages.append(f"{path}: {err.get('msg', 'Invalid value')}")
    return messages


def summarize_validation_errors(
    errors: List[Dict[str, Any]], limit: int = MAX_SUMMARIZED_ERRORS
) -> str:
    """Condense errors to the first few messages plus a count of the rest."""
    messages = format_validation_errors(errors)
    summary = "; ".join(messages[:limit])
    remaining = len(messages) - limit
    if remaining > 0:
        summary += f" (and {remaining} more errors)"
    return summary
