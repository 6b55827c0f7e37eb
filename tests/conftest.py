"""
Pytest configuration and shared fixtures for test suite.

Provides common test fixtures including mock configs, fake GitHub API
clients, tag listings and helpers for building mocked HTTP responses.
"""

import pytest
from unittest.mock import MagicMock

from git_tag_version.github_client import CommitInfo, TagRef
from git_tag_version.versioning import LabelConfig


HEAD_SHA = "c0" * 20
COMMITTER_DATE = "2024-05-01T12:00:00Z"


@pytest.fixture
def mock_config():
    """Create a mock Config object with sensible defaults."""
    config = MagicMock()
    config.github_token = "ghp_test_token_12345"
    config.repository = "octo-org/octo-repo"
    config.api_url = "https://api.github.com"
    config.timeout = 30
    config.sha = HEAD_SHA
    config.ref = "refs/heads/main"
    config.event_name = "push"
    config.labels = None
    config.output_file = ""
    config.log_level = "INFO"
    return config


@pytest.fixture
def label_config():
    """Label rule marking non-clean builds with -dev."""
    return LabelConfig(label="-dev", clean_marker="-clean")


def make_history(count, head=HEAD_SHA):
    """
    Helper function to build a list of commit shas, newest first.

    The first entry is the head commit; the others are c1, c2, ... padded to
    40 characters so they look like real shas.
    """
    return [head] + [f"c{i}".ljust(40, "0") for i in range(1, count)]


def create_fake_client(tags=(), history=(), committer_date=COMMITTER_DATE, head_sha=HEAD_SHA):
    """
    Helper function to create a fake GitHubClient.

    Args:
        tags: Iterable of (tag_name, commit_sha) pairs, in listing order
        history: Commit shas, newest first
        committer_date: Committer date reported for the head commit
        head_sha: Full sha get_commit resolves any ref to

    Returns:
        MagicMock: Object with the GitHubClient interface
    """
    client = MagicMock()
    client.list_tags.side_effect = lambda: iter([TagRef(name=n, commit_sha=s) for n, s in tags])
    client.get_commit.return_value = CommitInfo(sha=head_sha, committer_date=committer_date)
    client.iter_commits.side_effect = lambda branch, until: iter(list(history))
    return client


def create_mock_response(json_data=None, status_code=200, next_url=None):
    """
    Helper function to create a mocked requests.Response.

    Args:
        json_data: Value returned by response.json()
        status_code: HTTP status code
        next_url: URL of the next page for the Link header, if any

    Returns:
        MagicMock: Mocked response object
    """
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = json_data
    response.links = {"next": {"url": next_url}} if next_url else {}
    response.raise_for_status = MagicMock()
    return response


# Export helper functions so tests can use them
__all__ = [
    'HEAD_SHA',
    'COMMITTER_DATE',
    'make_history',
    'create_fake_client',
    'create_mock_response',
]
