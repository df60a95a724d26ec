"""GitHub Copilot metrics API client.

Fetches daily Copilot usage metrics for an enterprise or an organization,
validates the payload and caches it per (scope, date range).

API reference: https://docs.github.com/en/rest/copilot/copilot-metrics
Required token scopes: manage_billing:copilot, read:enterprise, read:org.

Errors are raised as GitHubClientError subclasses and never retried: a
failed fetch sends the report down the mock-data path instead.
"""

import logging
import time
from typing import Any, Dict, List, Optional

import httpx

from ..observability.metrics import record_upstream_request, record_validation_warnings
from ..reports.models import DateRange, ScopeType
from ..reports.schemas import summarize_validation_errors, validate_metrics_response
from .cache import MetricsCache, make_key
from .exceptions import (
    GitHubAPIError,
    GitHubAuthError,
    GitHubConnectionError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    GitHubTimeoutError,
    GitHubValidationError,
)
from .http_client import DEFAULT_TIMEOUT_SECONDS, get_http_client

logger = logging.getLogger(__name__)

GITHUB_API = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"

AUTH_FAILURE_CODES = {401, 403}
MAX_ERROR_BODY_CHARS = 500


class GitHubMetricsClient:
    """Client for the GitHub Copilot metrics endpoints.

    The token is only checked when a request is made, so the client (and
    the server around it) can start without one and serve mock reports.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        cache: Optional[MetricsCache] = None,
        api_url: str = GITHUB_API,
        api_version: str = GITHUB_API_VERSION,
        validate_responses: bool = True,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.token = token or ""
        self.cache = cache if cache is not None else MetricsCache()
        self.api_url = api_url.rstrip("/")
        self.api_version = api_version
        self.validate_responses = validate_responses
        self.timeout = timeout

    async def get_enterprise_metrics(
        self, enterprise_slug: str, date_range: DateRange
    ) -> List[Dict[str, Any]]:
        """GET /enterprises/{enterprise}/copilot/metrics"""
        return await self._get_metrics(
            "enterprise",
            enterprise_slug,
            f"/enterprises/{enterprise_slug}/copilot/metrics",
            date_range,
        )

    async def get_organization_metrics(
        self, org_name: str, date_range: DateRange
    ) -> List[Dict[str, Any]]:
        """GET /orgs/{org}/copilot/metrics"""
        return await self._get_metrics(
            "org",
            org_name,
            f"/orgs/{org_name}/copilot/metrics",
            date_range,
        )

    async def get_metrics(
        self, scope_type: ScopeType, scope_id: str, date_range: DateRange
    ) -> List[Dict[str, Any]]:
        """Dispatch to the enterprise or organization endpoint."""
        if scope_type == "org":
            return await self.get_organization_metrics(scope_id, date_range)
        return await self.get_enterprise_metrics(scope_id, date_range)

    # ------------------------------------------------------------------
    # Cache utilities
    # ------------------------------------------------------------------

    def clear_cache(self) -> None:
        self.cache.clear()

    def get_cache_stats(self) -> Dict[str, Any]:
        return self.cache.stats().to_dict()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _get_metrics(
        self,
        scope_type: ScopeType,
        scope_id: str,
        path: str,
        date_range: DateRange,
    ) -> List[Dict[str, Any]]:
        since = date_range.from_.isoformat()
        until = date_range.to.isoformat()
        cache_key = make_key(scope_type, scope_id, since, until)

        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info("Cache hit: %s metrics for %s", scope_type, scope_id)
            return cached

        logger.info("API call: fetching %s metrics for %s (%s..%s)", scope_type, scope_id, since, until)
        raw = await self._request(path, {"since": since, "until": until}, scope_type)
        metrics = self._validate_response(raw, scope_id)

        self.cache.put(cache_key, metrics)
        return metrics

    async def _request(self, path: str, params: Dict[str, str], scope_type: str) -> Any:
        """Make an authenticated GET request and return the decoded JSON body.

        Raises:
            GitHubAuthError: No token configured, or HTTP 401/403.
            GitHubNotFoundError: HTTP 404.
            GitHubRateLimitError: HTTP 429.
            GitHubAPIError: Any other non-2xx response or an unparseable body.
            GitHubTimeoutError: The request timed out.
            GitHubConnectionError: The request failed before a response arrived.
        """
        if not self.token:
            raise GitHubAuthError(
                "GitHub token is required. Set the GITHUB_TOKEN environment variable."
            )

        headers = {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": self.api_version,
        }

        client = get_http_client(self.timeout)
        start = time.perf_counter()
        try:
            response = await client.get(f"{self.api_url}{path}", params=params, headers=headers)
        except httpx.TimeoutException as exc:
            record_upstream_request(scope_type, "timeout", time.perf_counter() - start)
            raise GitHubTimeoutError(
                f"GitHub API request timed out: {type(exc).__name__}"
            ) from exc
        except httpx.RequestError as exc:
            record_upstream_request(scope_type, "connection_error", time.perf_counter() - start)
            raise GitHubConnectionError(
                f"GitHub API request failed: {type(exc).__name__}: {exc}"
            ) from exc

        status = response.status_code
        record_upstream_request(scope_type, str(status), time.perf_counter() - start)

        if not 200 <= status < 300:
            _raise_for_status(response)

        try:
            return response.json()
        except ValueError as exc:
            raise GitHubAPIError(
                f"GitHub API returned invalid JSON (status {status})",
                status_code=status,
                response_body=response.text[:MAX_ERROR_BODY_CHARS],
            ) from exc

    def _validate_response(self, data: Any, context: str) -> List[Dict[str, Any]]:
        """Validate the payload against the metrics schema.

        Returns the validated records; raises GitHubValidationError with a
        condensed error summary when the payload does not match.
        """
        if not self.validate_responses:
            return data

        result = validate_metrics_response(data)

        if not result.success:
            summary = summarize_validation_errors(result.errors)
            logger.error("Validation error: invalid API response for %s: %s", context, summary)
            raise GitHubValidationError(
                f"GitHub API response validation failed for {context}: {summary}",
                errors=result.errors,
            )

        if result.warnings:
            record_validation_warnings(len(result.warnings))
            for warning in result.warnings:
                logger.warning("Validation warning for %s: %s", context, warning)

        return result.data


def _raise_for_status(response: httpx.Response):
    """Map a non-2xx response to the matching GitHubClientError."""
    status = response.status_code
    body = response.text[:MAX_ERROR_BODY_CHARS]
    message = f"GitHub API error ({status}): {body}"

    if status in AUTH_FAILURE_CODES:
        raise GitHubAuthError(message, status_code=status)
    if status == 404:
        raise GitHubNotFoundError(message, response_body=body)
    if status == 429:
        raise GitHubRateLimitError(
            message,
            retry_after=_parse_retry_after(response),
            response_body=body,
        )
    raise GitHubAPIError(message, status_code=status, response_body=body)


def _parse_retry_after(response: httpx.Response) -> Optional[float]:
    """Parse Retry-After header (seconds only, not HTTP-date)."""
    value = response.headers.get("Retry-After") or response.headers.get("retry-after")
    if value is None:
        return None
    try:
        return float(value)
    except (ValueError, TypeError):
        return None
