"""Report request and report data model.

Field names are snake_case in Python and camelCase on the wire; the JSON
shape produced by ``Report.to_dict()`` is consumed by the AI-facing tool and
the dashboard, so renaming an alias is a breaking change for both.
All models are frozen: a report is built once per request and never mutated.
"""

from datetime import date
from typing import Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

ScopeType = Literal["enterprise", "org"]
DataSource = Literal["live", "mock"]

# Upstream counters are integers in practice, but the API schema only
# promises JSON numbers.
Count = Union[int, float]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class DateRange(CamelModel):
    """Inclusive calendar date range."""

    from_: date = Field(alias="from")
    to: date


class ReportRequest(CamelModel):
    """Parameters of a report: the scope and the requested date range."""

    enterprise_slug: str = Field(min_length=1)
    org_name: Optional[str] = None
    date_range: DateRange

    @field_validator("org_name", mode="before")
    @classmethod
    def blank_org_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def scope_type(self) -> ScopeType:
        """Organization scope when an org is named, else the whole enterprise."""
        return "org" if self.org_name else "enterprise"

    @property
    def scope_id(self) -> str:
        return self.org_name or self.enterprise_slug


class ReportDateRange(CamelModel):
    from_: str = Field(alias="from")
    to: str


class ReportMetadata(CamelModel):
    enterprise_slug: str
    org_name: Optional[str] = None
    date_range: ReportDateRange
    generated_at: str
    total_days: int


class ReportSummary(CamelModel):
    total_active_users: Count = 0
    total_engaged_users: Count = 0
    peak_active_users: Count = 0
    peak_active_users_date: str = ""
    avg_daily_active_users: float = 0
    total_code_suggestions: Count = 0
    total_code_acceptances: Count = 0
    acceptance_rate: float = 0
    total_lines_of_code_suggested: Count = 0
    total_lines_of_code_accepted: Count = 0
    total_chats: Count = 0
    total_chat_insertions: Count = 0
    total_chat_copy_events: Count = 0
    total_pr_summaries: Count = 0


class DailyMetrics(CamelModel):
    date: str
    active_users: Count = 0
    engaged_users: Count = 0
    code_suggestions: Count = 0
    code_acceptances: Count = 0
    acceptance_rate: float = 0
    lines_of_code_suggested: Count = 0
    lines_of_code_accepted: Count = 0
    chat_sessions: Count = 0
    chat_insertions: Count = 0
    pr_summaries: Count = 0


class LanguageBreakdown(CamelModel):
    language: str
    engaged_users: Count = 0
    suggestions: Count = 0
    acceptances: Count = 0
    acceptance_rate: float = 0
    lines_suggested: Count = 0
    lines_accepted: Count = 0


class EditorBreakdown(CamelModel):
    editor: str
    engaged_users: Count = 0
    chat_sessions: Count = 0


class TrendDataPoint(CamelModel):
    date: str
    value: Count


class TrendData(CamelModel):
    active_users_trend: Tuple[TrendDataPoint, ...] = ()
    acceptance_rate_trend: Tuple[TrendDataPoint, ...] = ()
    suggestions_volume_trend: Tuple[TrendDataPoint, ...] = ()


class AggregatedMetrics(CamelModel):
    """Everything derived from the daily records, without request metadata."""

    summary: ReportSummary
    daily_metrics: Tuple[DailyMetrics, ...] = ()
    language_breakdown: Tuple[LanguageBreakdown, ...] = ()
    editor_breakdown: Tuple[EditorBreakdown, ...] = ()
    trends: TrendData = TrendData()


class Report(CamelModel):
    metadata: ReportMetadata
    summary: ReportSummary
    daily_metrics: Tuple[DailyMetrics, ...] = ()
    language_breakdown: Tuple[LanguageBreakdown, ...] = ()
    editor_breakdown: Tuple[EditorBreakdown, ...] = ()
    trends: TrendData = TrendData()
    data_source: DataSource
    api_error: Optional[str] = None

    def to_dict(self) -> dict:
        """Serialize to the wire shape; absent optional keys are omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self, indent: Optional[int] = None) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=indent)
