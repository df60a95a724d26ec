"""Test configuration and fixtures."""

import copy
import os

import pytest

# Set test environment variables BEFORE importing the package
os.environ["ENVIRONMENT"] = "test"
os.environ.pop("GITHUB_TOKEN", None)

from copilot_compass.config import get_settings
from copilot_compass.observability.metrics import set_metrics_enabled
from copilot_compass.reports.models import ReportRequest


# ---------------------------------------------------------------------------
# Upstream payloads
# ---------------------------------------------------------------------------

def _chat_model(chats, insertions, copies, engaged=0):
    return {
        "name": "gpt-4o",
        "is_custom_model": False,
        "total_engaged_users": engaged,
        "total_chats": chats,
        "total_chat_insertion_events": insertions,
        "total_chat_copy_events": copies,
    }


def _language(name, engaged, suggestions, acceptances, lines_suggested, lines_accepted):
    return {
        "name": name,
        "total_engaged_users": engaged,
        "total_code_suggestions": suggestions,
        "total_code_acceptances": acceptances,
        "total_code_lines_suggested": lines_suggested,
        "total_code_lines_accepted": lines_accepted,
    }


def _pr_repo(name, summaries):
    return {
        "name": name,
        "total_engaged_users": summaries,
        "models": [{
            "name": "gpt-4o",
            "is_custom_model": False,
            "total_pr_summaries_created": summaries,
            "total_engaged_users": summaries,
        }],
    }


COMPLETE_RESPONSE = [
    {
        "date": "2026-01-15",
        "total_active_users": 150,
        "total_engaged_users": 125,
        "copilot_ide_code_completions": {
            "total_engaged_users": 115,
            "languages": [
                _language("TypeScript", 80, 5000, 1650, 15000, 4950),
                _language("Python", 60, 3500, 1225, 10500, 3675),
            ],
            "editors": [
                {"name": "VS Code", "total_engaged_users": 95},
                {"name": "JetBrains", "total_engaged_users": 20},
            ],
        },
        "copilot_ide_chat": {
            "total_engaged_users": 90,
            "editors": [
                {
                    "name": "VS Code",
                    "total_engaged_users": 75,
                    "models": [_chat_model(450, 180, 90, engaged=75)],
                },
                {
                    "name": "JetBrains",
                    "total_engaged_users": 15,
                    "models": [_chat_model(75, 30, 15, engaged=15)],
                },
            ],
        },
        "copilot_dotcom_chat": {
            "total_engaged_users": 30,
            "models": [_chat_model(120, 25, 40, engaged=30)],
        },
        "copilot_dotcom_pull_requests": {
            "total_engaged_users": 45,
            "repositories": [_pr_repo("org/main-app", 28), _pr_repo("org/api-service", 15)],
        },
    },
    {
        "date": "2026-01-16",
        "total_active_users": 162,
        "total_engaged_users": 138,
        "copilot_ide_code_completions": {
            "total_engaged_users": 125,
            "languages": [
                _language("TypeScript", 88, 5500, 1870, 16500, 5610),
                _language("Python", 55, 3200, 1088, 9600, 3264),
            ],
            "editors": [
                {"name": "VS Code", "total_engaged_users": 105},
            ],
        },
        "copilot_ide_chat": {
            "total_engaged_users": 95,
            "editors": [
                {
                    "name": "VS Code",
                    "total_engaged_users": 80,
                    "models": [_chat_model(500, 200, 100, engaged=80)],
                },
            ],
        },
        "copilot_dotcom_pull_requests": {
            "total_engaged_users": 30,
            "repositories": [_pr_repo("org/main-app", 30)],
        },
    },
]

MINIMAL_RESPONSE = [
    {"date": "2026-01-15", "total_active_users": 50, "total_engaged_users": 40},
    {"date": "2026-01-16", "total_active_users": 55, "total_engaged_users": 45},
]


@pytest.fixture
def complete_response():
    """Two fully populated days (deep copy, safe to mutate)."""
    return copy.deepcopy(COMPLETE_RESPONSE)


@pytest.fixture
def minimal_response():
    """Two days with only the top-level counters."""
    return copy.deepcopy(MINIMAL_RESPONSE)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

def make_request(enterprise="acme", org=None, date_from="2026-01-15", date_to="2026-01-16"):
    return ReportRequest.model_validate({
        "enterpriseSlug": enterprise,
        "orgName": org,
        "dateRange": {"from": date_from, "to": date_to},
    })


@pytest.fixture
def enterprise_request():
    return make_request()


@pytest.fixture
def org_request():
    return make_request(org="platform")


# ---------------------------------------------------------------------------
# Process-wide state
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def reset_global_state():
    """Keep settings cache and metrics flag from leaking between tests."""
    get_settings.cache_clear()
    set_metrics_enabled(False)
    yield
    get_settings.cache_clear()
    set_metrics_enabled(False)


@pytest.fixture
def request_factory():
    """Build a ReportRequest from keyword overrides."""
    return make_request
