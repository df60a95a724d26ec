"""Synthetic Copilot metrics for demos and for the fallback path.

The generator produces raw daily records in the upstream API shape and
feeds them through the regular aggregator, so a mock report is built by
exactly the same arithmetic as a live one.

Patterns:
- weekend dip: activity x0.65 on Saturday and Sunday
- growth: +0.5% per day across the range
- day-to-day jitter within +/-10%
- acceptance rate 28-36%, engaged users 82-90% of active users
- 2.2-2.8 chat sessions per active user, PR summaries for 12-18% of users
"""

import logging
import random
import zlib
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from .builder import build_report
from .models import Report, ReportRequest

logger = logging.getLogger(__name__)

BASE_ACTIVE_USERS = 1180
BASE_DAILY_SUGGESTIONS = 42000
WEEKEND_MULTIPLIER = 0.65
DAILY_GROWTH = 0.005

# (name, share of suggestions, share of engaged users)
LANGUAGES = (
    ("TypeScript", 0.24, 0.78),
    ("Python", 0.21, 0.66),
    ("JavaScript", 0.16, 0.58),
    ("C#", 0.11, 0.38),
    ("Java", 0.09, 0.36),
    ("SQL", 0.05, 0.22),
    ("Go", 0.04, 0.18),
    ("Kotlin", 0.03, 0.12),
    ("Ruby", 0.025, 0.10),
    ("PHP", 0.02, 0.09),
    ("Swift", 0.015, 0.07),
    ("Rust", 0.01, 0.06),
)

# (name, share of engaged users, share of IDE chat sessions)
EDITORS = (
    ("VS Code", 0.60, 0.68),
    ("Visual Studio", 0.16, 0.14),
    ("JetBrains IDEs", 0.13, 0.12),
    ("Neovim", 0.05, 0.03),
    ("Xcode", 0.03, 0.02),
    ("Eclipse", 0.03, 0.01),
)

# (name, share of PR summaries)
REPOSITORIES = (
    ("web-app", 0.5),
    ("api-service", 0.3),
    ("infrastructure", 0.2),
)

MODEL_NAME = "default"
IDE_CHAT_SHARE = 0.85


def _model(name: str = MODEL_NAME, **counters) -> Dict[str, Any]:
    return {
        "name": name,
        "is_custom_model": False,
        "custom_model_training_date": None,
        **counters,
    }


def request_seed(request: ReportRequest) -> int:
    """Stable seed for a request: identical requests yield identical data."""
    key = ":".join((
        request.scope_type,
        request.scope_id,
        request.date_range.from_.isoformat(),
        request.date_range.to.isoformat(),
    ))
    return zlib.crc32(key.encode("utf-8"))


class MockReportGenerator:
    """Generates believable daily metrics for a request.

    Args:
        seed: Fixed PRNG seed. When None the seed is derived from the
            request scope and dates.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed

    def generate_days(self, request: ReportRequest) -> List[Dict[str, Any]]:
        """One raw daily record per calendar day in the inclusive range."""
        rng = random.Random(self.seed if self.seed is not None else request_seed(request))
        start = request.date_range.from_
        total_days = (request.date_range.to - start).days + 1

        return [
            self._generate_day(rng, start + timedelta(days=i), i)
            for i in range(max(total_days, 0))
        ]

    def generate_report(self, request: ReportRequest, api_error: Optional[str] = None) -> Report:
        """Build a report tagged ``mock`` from synthetic days."""
        days = self.generate_days(request)
        logger.info(
            "Generated mock report for %s %s (%d day(s))",
            request.scope_type,
            request.scope_id,
            len(days),
        )
        return build_report(request, days, data_source="mock", api_error=api_error)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _generate_day(self, rng: random.Random, day: date, index: int) -> Dict[str, Any]:
        weekend = WEEKEND_MULTIPLIER if day.weekday() >= 5 else 1.0
        growth = 1 + index * DAILY_GROWTH
        variation = rng.uniform(0.9, 1.1)
        scale = weekend * growth * variation

        active_users = int(BASE_ACTIVE_USERS * scale)
        engaged_users = int(active_users * rng.uniform(0.82, 0.90))
        suggestions = int(BASE_DAILY_SUGGESTIONS * scale)
        rate = rng.uniform(28, 36)

        chat_sessions = int(active_users * rng.uniform(2.2, 2.8))
        ide_chats = int(chat_sessions * IDE_CHAT_SHARE)
        dotcom_chats = chat_sessions - ide_chats
        pr_summaries = int(active_users * rng.uniform(0.12, 0.18))

        return {
            "date": day.isoformat(),
            "total_active_users": active_users,
            "total_engaged_users": engaged_users,
            "copilot_ide_code_completions": {
                "total_engaged_users": int(engaged_users * 0.95),
                "languages": self._languages(rng, suggestions, engaged_users, rate),
                "editors": [
                    {
                        "name": name,
                        "total_engaged_users": int(engaged_users * share),
                        "models": [_model(total_engaged_users=int(engaged_users * share))],
                    }
                    for name, share, _ in EDITORS
                ],
            },
            "copilot_ide_chat": {
                "total_engaged_users": int(engaged_users * 0.7),
                "editors": [
                    self._chat_editor(rng, name, int(engaged_users * share * 0.7), int(ide_chats * chat_share))
                    for name, share, chat_share in EDITORS
                ],
            },
            "copilot_dotcom_chat": {
                "total_engaged_users": int(engaged_users * 0.2),
                "models": [self._chat_model(rng, int(engaged_users * 0.2), dotcom_chats)],
            },
            "copilot_dotcom_pull_requests": {
                "total_engaged_users": pr_summaries,
                "repositories": [
                    {
                        "name": name,
                        "total_engaged_users": int(pr_summaries * share),
                        "models": [_model(
                            total_engaged_users=int(pr_summaries * share),
                            total_pr_summaries_created=int(pr_summaries * share),
                        )],
                    }
                    for name, share in REPOSITORIES
                ],
            },
        }

    def _languages(self, rng, suggestions, engaged_users, rate) -> List[Dict[str, Any]]:
        languages = []
        for name, share, reach in LANGUAGES:
            lang_suggestions = int(suggestions * share)
            # per-language rates spread around the day's rate
            lang_rate = min(max(rate + rng.uniform(-2, 2), 28), 36)
            lines_suggested = int(lang_suggestions * rng.uniform(2.8, 3.6))
            languages.append({
                "name": name,
                "total_engaged_users": int(engaged_users * reach),
                "total_code_suggestions": lang_suggestions,
                "total_code_acceptances": int(lang_suggestions * lang_rate / 100),
                "total_code_lines_suggested": lines_suggested,
                "total_code_lines_accepted": int(lines_suggested * lang_rate / 100),
            })
        return languages

    def _chat_editor(self, rng, name, engaged_users, chats) -> Dict[str, Any]:
        return {
            "name": name,
            "total_engaged_users": engaged_users,
            "models": [self._chat_model(rng, engaged_users, chats)],
        }

    def _chat_model(self, rng, engaged_users, chats) -> Dict[str, Any]:
        return _model(
            total_engaged_users=engaged_users,
            total_chats=chats,
            total_chat_insertion_events=int(chats * rng.uniform(0.35, 0.5)),
            total_chat_copy_events=int(chats * rng.uniform(0.15, 0.25)),
        )
