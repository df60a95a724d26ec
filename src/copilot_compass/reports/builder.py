"""Assemble a Report from a request and its daily records.

Shared by the live path (ReportGenerator) and the mock path
(MockReportGenerator) so both produce reports through the same aggregator.
"""

from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Sequence

from .aggregator import aggregate
from .models import DataSource, Report, ReportDateRange, ReportMetadata, ReportRequest


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2026-01-15T10:00:00.000Z."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_metadata(
    request: ReportRequest,
    days: Sequence[Mapping[str, Any]],
    generated_at: Optional[str] = None,
) -> ReportMetadata:
    return ReportMetadata(
        enterprise_slug=request.enterprise_slug,
        org_name=request.org_name,
        date_range=ReportDateRange(
            from_=request.date_range.from_.isoformat(),
            to=request.date_range.to.isoformat(),
        ),
        generated_at=generated_at or utc_timestamp(),
        total_days=len(days),
    )


def build_report(
    request: ReportRequest,
    days: Sequence[Mapping[str, Any]],
    data_source: DataSource,
    api_error: Optional[str] = None,
    generated_at: Optional[str] = None,
) -> Report:
    """Aggregate the days and wrap the sections with request metadata.

    ``api_error`` is only kept on mock reports.
    """
    days = list(days)
    sections = aggregate(days)
    return Report(
        metadata=build_metadata(request, days, generated_at),
        summary=sections.summary,
        daily_metrics=sections.daily_metrics,
        language_breakdown=sections.language_breakdown,
        editor_breakdown=sections.editor_breakdown,
        trends=sections.trends,
        data_source=data_source,
        api_error=api_error if data_source == "mock" else None,
    )
