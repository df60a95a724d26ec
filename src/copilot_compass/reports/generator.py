"""Report assembly: fetch, aggregate, or fall back to mock data.

    GitHubMetricsClient.get_*_metrics()   (cache or network, validated)
            |
    list of raw daily records
            |
    aggregate() -> Report(dataSource="live")

Any failure of the fetch (missing token, HTTP error, timeout, invalid
payload) produces a mock report instead, carrying the error message as
``apiError``. The caller always gets a report.
"""

import logging
import uuid
from typing import Optional

from ..config import Settings, get_settings
from ..github.cache import MetricsCache
from ..github.client import GitHubMetricsClient
from ..observability.logging import log_context
from ..observability.metrics import record_report
from .builder import build_report
from .mock import MockReportGenerator
from .models import Report, ReportRequest

logger = logging.getLogger(__name__)


class ReportGenerator:
    """Builds Copilot usage reports for a scope and date range."""

    def __init__(
        self,
        client: GitHubMetricsClient,
        mock_generator: Optional[MockReportGenerator] = None,
    ):
        self.client = client
        self.mock_generator = mock_generator or MockReportGenerator()

    async def generate_report(self, request: ReportRequest) -> Report:
        """Generate a report, falling back to mock data when the fetch fails."""
        scope = f"{request.scope_type}:{request.scope_id}"
        with log_context(scope=scope, request_id=uuid.uuid4().hex[:12]):
            try:
                if request.scope_type == "org":
                    days = await self.client.get_organization_metrics(request.org_name, request.date_range)
                else:
                    days = await self.client.get_enterprise_metrics(request.enterprise_slug, request.date_range)
            except Exception as exc:
                logger.warning("Metrics fetch failed: %s. Using mock data.", exc)
                report = self.mock_generator.generate_report(request, api_error=str(exc))
            else:
                report = build_report(request, days, data_source="live")
                logger.info("Generated live report (%d day(s))", report.metadata.total_days)

            record_report(report.data_source)
            return report

    def clear_cache(self) -> None:
        self.client.clear_cache()


def build_report_generator(settings: Optional[Settings] = None) -> ReportGenerator:
    """Wire cache -> client -> generator from settings."""
    settings = settings or get_settings()
    cache = MetricsCache(ttl_seconds=settings.cache_ttl_seconds)
    client = GitHubMetricsClient(
        token=settings.github_token,
        cache=cache,
        api_url=settings.github_api_url,
        api_version=settings.github_api_version,
        validate_responses=settings.validate_api_responses,
        timeout=settings.http_timeout_seconds,
    )
    return ReportGenerator(client, MockReportGenerator(seed=settings.mock_seed))
