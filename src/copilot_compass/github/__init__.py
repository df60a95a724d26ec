"""GitHub Copilot metrics client, cache and errors."""

from .cache import MetricsCache, make_key
from .client import GitHubMetricsClient
from .exceptions import GitHubClientError

__all__ = ["GitHubMetricsClient", "GitHubClientError", "MetricsCache", "make_key"]
