"""Aggregation of daily Copilot metrics into report sections.

Everything here is a pure function of the daily records: no I/O, no clock,
no randomness. The functions are total over any list of records: missing
sections, missing lists and missing counters contribute zero, and every
rate guards its divisor so no output value is NaN or infinite.

Records are the open dicts produced by ``reports.schemas`` (or raw API
dicts when validation is disabled). Nested sections are only ever read
through the accessors below.
"""

import logging
import math
import sys
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Sequence

from .models import (
    AggregatedMetrics,
    DailyMetrics,
    EditorBreakdown,
    LanguageBreakdown,
    ReportSummary,
    TrendData,
    TrendDataPoint,
)

logger = logging.getLogger(__name__)

CODE_COMPLETIONS = "copilot_ide_code_completions"
IDE_CHAT = "copilot_ide_chat"
DOTCOM_CHAT = "copilot_dotcom_chat"
PULL_REQUESTS = "copilot_dotcom_pull_requests"


# ---------------------------------------------------------------------------
# Accessors: absent means zero contribution
# ---------------------------------------------------------------------------

def _section(record: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = record.get(key)
    return value if isinstance(value, Mapping) else {}


def _entries(container: Mapping[str, Any], key: str) -> List[Mapping[str, Any]]:
    value = container.get(key)
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, Mapping)]


def _count(entry: Mapping[str, Any], key: str):
    value = entry.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return _finite(value)


def _finite(value):
    """Zero for values no float can hold: inf, NaN, or ints past the float range."""
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    if isinstance(value, int) and abs(value) > sys.float_info.max:
        return 0
    return value


def _name(entry: Mapping[str, Any]) -> str:
    return str(entry.get("name", "unknown"))


def _ratio(numerator, denominator, scale=1) -> float:
    if not denominator > 0:
        return 0.0
    try:
        value = numerator / denominator * scale
    except OverflowError:
        return 0.0
    return round(value, 2) if math.isfinite(value) else 0.0


def acceptance_rate(acceptances, suggestions) -> float:
    """Percentage of suggestions accepted, rounded to 2 places; 0 with no suggestions."""
    return _ratio(acceptances, suggestions, 100)


def _chat_models(record: Mapping[str, Any]) -> Iterable[Mapping[str, Any]]:
    """Chat models from IDE chat (editor -> model) and dotcom chat (model)."""
    for editor in _entries(_section(record, IDE_CHAT), "editors"):
        yield from _entries(editor, "models")
    yield from _entries(_section(record, DOTCOM_CHAT), "models")


# ---------------------------------------------------------------------------
# Per-day totals
# ---------------------------------------------------------------------------

@dataclass
class DayTotals:
    """Flat counters for one day; the building block of summary and daily rows."""

    date: str
    active_users: Any = 0
    engaged_users: Any = 0
    code_suggestions: Any = 0
    code_acceptances: Any = 0
    lines_suggested: Any = 0
    lines_accepted: Any = 0
    chats: Any = 0
    chat_insertions: Any = 0
    chat_copy_events: Any = 0
    pr_summaries: Any = 0


def day_totals(record: Mapping[str, Any]) -> DayTotals:
    totals = DayTotals(
        date=str(record.get("date", "")),
        active_users=_count(record, "total_active_users"),
        engaged_users=_count(record, "total_engaged_users"),
    )

    for lang in _entries(_section(record, CODE_COMPLETIONS), "languages"):
        totals.code_suggestions += _count(lang, "total_code_suggestions")
        totals.code_acceptances += _count(lang, "total_code_acceptances")
        totals.lines_suggested += _count(lang, "total_code_lines_suggested")
        totals.lines_accepted += _count(lang, "total_code_lines_accepted")

    for model in _chat_models(record):
        totals.chats += _count(model, "total_chats")
        totals.chat_insertions += _count(model, "total_chat_insertion_events")
        totals.chat_copy_events += _count(model, "total_chat_copy_events")

    for repo in _entries(_section(record, PULL_REQUESTS), "repositories"):
        for model in _entries(repo, "models"):
            totals.pr_summaries += _count(model, "total_pr_summaries_created")

    # float counters can sum past the float range
    for name, value in vars(totals).items():
        if name != "date":
            setattr(totals, name, _finite(value))
    return totals


# ---------------------------------------------------------------------------
# Report sections
# ---------------------------------------------------------------------------

def build_summary(days: Sequence[Mapping[str, Any]]) -> ReportSummary:
    """Summarize the whole period.

    User totals are the largest single-day values (reach, not cumulative
    activity); the peak is the first day with the strictly greatest number
    of active users. The daily average includes zero-activity days.
    """
    total_active = 0
    total_engaged = 0
    peak_active = 0
    peak_date = ""
    active_sum = 0
    suggestions = acceptances = lines_suggested = lines_accepted = 0
    chats = chat_insertions = chat_copy_events = pr_summaries = 0

    for record in days:
        day = day_totals(record)

        total_active = max(total_active, day.active_users)
        total_engaged = max(total_engaged, day.engaged_users)
        if day.active_users > peak_active:
            peak_active = day.active_users
            peak_date = day.date
        active_sum += day.active_users

        suggestions += day.code_suggestions
        acceptances += day.code_acceptances
        lines_suggested += day.lines_suggested
        lines_accepted += day.lines_accepted
        chats += day.chats
        chat_insertions += day.chat_insertions
        chat_copy_events += day.chat_copy_events
        pr_summaries += day.pr_summaries

    avg_active = _ratio(active_sum, len(days))
    suggestions = _finite(suggestions)
    acceptances = _finite(acceptances)

    return ReportSummary(
        total_active_users=total_active,
        total_engaged_users=total_engaged,
        peak_active_users=peak_active,
        peak_active_users_date=peak_date,
        avg_daily_active_users=avg_active,
        total_code_suggestions=suggestions,
        total_code_acceptances=acceptances,
        acceptance_rate=acceptance_rate(acceptances, suggestions),
        total_lines_of_code_suggested=_finite(lines_suggested),
        total_lines_of_code_accepted=_finite(lines_accepted),
        total_chats=_finite(chats),
        total_chat_insertions=_finite(chat_insertions),
        total_chat_copy_events=_finite(chat_copy_events),
        total_pr_summaries=_finite(pr_summaries),
    )


def build_daily_metrics(days: Sequence[Mapping[str, Any]]) -> List[DailyMetrics]:
    """One flat row per input day, in input order."""
    daily = []
    for record in days:
        day = day_totals(record)
        daily.append(DailyMetrics(
            date=day.date,
            active_users=day.active_users,
            engaged_users=day.engaged_users,
            code_suggestions=day.code_suggestions,
            code_acceptances=day.code_acceptances,
            acceptance_rate=acceptance_rate(day.code_acceptances, day.code_suggestions),
            lines_of_code_suggested=day.lines_suggested,
            lines_of_code_accepted=day.lines_accepted,
            chat_sessions=day.chats,
            chat_insertions=day.chat_insertions,
            pr_summaries=day.pr_summaries,
        ))
    return daily


def build_language_breakdown(days: Sequence[Mapping[str, Any]]) -> List[LanguageBreakdown]:
    """Per-language totals across the period, largest suggestion volume first."""
    language_stats: Dict[str, Dict[str, Any]] = {}

    for record in days:
        for lang in _entries(_section(record, CODE_COMPLETIONS), "languages"):
            name = _name(lang)
            if name not in language_stats:
                language_stats[name] = {
                    "engaged_users": 0,
                    "suggestions": 0,
                    "acceptances": 0,
                    "lines_suggested": 0,
                    "lines_accepted": 0,
                }
            stats = language_stats[name]
            stats["engaged_users"] = max(stats["engaged_users"], _count(lang, "total_engaged_users"))
            stats["suggestions"] += _count(lang, "total_code_suggestions")
            stats["acceptances"] += _count(lang, "total_code_acceptances")
            stats["lines_suggested"] += _count(lang, "total_code_lines_suggested")
            stats["lines_accepted"] += _count(lang, "total_code_lines_accepted")

    breakdown = []
    for name, raw in language_stats.items():
        stats = {key: _finite(value) for key, value in raw.items()}
        breakdown.append(LanguageBreakdown(
            language=name,
            acceptance_rate=acceptance_rate(stats["acceptances"], stats["suggestions"]),
            **stats,
        ))
    # sorted() is stable: equal volumes keep first-seen order
    return sorted(breakdown, key=lambda item: item.suggestions, reverse=True)


def build_editor_breakdown(days: Sequence[Mapping[str, Any]]) -> List[EditorBreakdown]:
    """Per-editor reach and chat volume, most engaged users first.

    Code-completion editors and IDE-chat editors with the same name share
    one bucket.
    """
    editor_stats: Dict[str, Dict[str, Any]] = {}

    def _observe(name: str, engaged, chat_sessions=0):
        if name not in editor_stats:
            editor_stats[name] = {"engaged_users": engaged, "chat_sessions": chat_sessions}
            return
        stats = editor_stats[name]
        stats["engaged_users"] = max(stats["engaged_users"], engaged)
        stats["chat_sessions"] += chat_sessions

    for record in days:
        for editor in _entries(_section(record, CODE_COMPLETIONS), "editors"):
            _observe(_name(editor), _count(editor, "total_engaged_users"))

        for editor in _entries(_section(record, IDE_CHAT), "editors"):
            chat_sessions = sum(_count(model, "total_chats") for model in _entries(editor, "models"))
            _observe(_name(editor), _count(editor, "total_engaged_users"), chat_sessions)

    breakdown = [
        EditorBreakdown(editor=name, **{key: _finite(value) for key, value in stats.items()})
        for name, stats in editor_stats.items()
    ]
    return sorted(breakdown, key=lambda item: item.engaged_users, reverse=True)


def build_trends(daily_metrics: Sequence[DailyMetrics]) -> TrendData:
    return TrendData(
        active_users_trend=[
            TrendDataPoint(date=d.date, value=d.active_users) for d in daily_metrics
        ],
        acceptance_rate_trend=[
            TrendDataPoint(date=d.date, value=d.acceptance_rate) for d in daily_metrics
        ],
        suggestions_volume_trend=[
            TrendDataPoint(date=d.date, value=d.code_suggestions) for d in daily_metrics
        ],
    )


def aggregate(days: Sequence[Mapping[str, Any]]) -> AggregatedMetrics:
    """Build every derived report section from the daily records."""
    days = list(days)
    daily_metrics = build_daily_metrics(days)
    result = AggregatedMetrics(
        summary=build_summary(days),
        daily_metrics=daily_metrics,
        language_breakdown=build_language_breakdown(days),
        editor_breakdown=build_editor_breakdown(days),
        trends=build_trends(daily_metrics),
    )
    logger.debug(
        "Aggregated %d day(s): %d language(s), %d editor(s)",
        len(days),
        len(result.language_breakdown),
        len(result.editor_breakdown),
    )
    return result
