"""GitHub client exception types.

Raised by GitHubMetricsClient and caught once, by ReportGenerator, which
turns any of them into a mock report carrying ``str(exc)`` as apiError.
None of them are retried.
"""

from typing import Optional


class GitHubClientError(Exception):
    """Base exception for all metrics fetch errors."""

    def __init__(self, message: str, status_code: int = 0):
        self.status_code = status_code
        super().__init__(message)


class GitHubAuthError(GitHubClientError):
    """Missing token or authentication/authorization failure (401/403)."""

    pass


class GitHubAPIError(GitHubClientError):
    """API returned an error response (4xx/5xx)."""

    def __init__(
        self,
        message: str,
        status_code: int = 0,
        response_body: str = "",
    ):
        self.response_body = response_body
        super().__init__(message, status_code)


class GitHubNotFoundError(GitHubAPIError):
    """Enterprise or organization not found, or metrics not enabled (404)."""

    def __init__(self, message: str, response_body: str = ""):
        super().__init__(message, status_code=404, response_body=response_body)


class GitHubRateLimitError(GitHubAPIError):
    """Rate limit exceeded (429). Includes retry_after hint if available."""

    def __init__(
        self,
        message: str,
        retry_after: Optional[float] = None,
        response_body: str = "",
    ):
        self.retry_after = retry_after
        super().__init__(message, status_code=429, response_body=response_body)


class GitHubConnectionError(GitHubClientError):
    """Network failure before a response arrived."""

    pass


class GitHubTimeoutError(GitHubClientError):
    """Request timed out."""

    pass


class GitHubValidationError(GitHubClientError):
    """Response body did not match the expected metrics schema."""

    def __init__(self, message: str, errors: Optional[list] = None):
        self.errors = errors or []
        super().__init__(message)
