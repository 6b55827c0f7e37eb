"""
GitHub REST API client.

Handles session setup with a retry strategy, paginated tag listing,
lazy commit history iteration, and commit metadata lookups.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from loguru import logger

from ._version import __version__

DEFAULT_API_URL = 'https://api.github.com'
API_VERSION = '2022-11-28'
PER_PAGE = 100


class GitHubAPIError(Exception):
    """Raised when a GitHub API request fails or returns an unexpected payload."""


@dataclass(frozen=True)
class TagRef:
    """A repository tag and the commit it points at."""
    name: str
    commit_sha: str


@dataclass(frozen=True)
class CommitInfo:
    """Metadata of a single commit."""
    sha: str
    committer_date: str


def create_session(token: str) -> requests.Session:
    """
    Create an authenticated requests session with retry strategy.

    Args:
        token: GitHub token used as a bearer credential

    Returns:
        requests.Session: Configured session
    """
    retry_strategy = Retry(
        total=3,
        backoff_factor=0.3,
        status_forcelist=[500, 502, 503, 504],
        allowed_methods=['GET'],
    )
    adapter = HTTPAdapter(max_retries=retry_strategy)
    session = requests.Session()
    session.mount('http://', adapter)
    session.mount('https://', adapter)
    session.headers.update({
        'Authorization': f'Bearer {token}',
        'Accept': 'application/vnd.github+json',
        'X-GitHub-Api-Version': API_VERSION,
        'User-Agent': f'git-tag-version/{__version__}',
    })
    return session


def _error_detail(response) -> str:
    """Extract the API's error message from a failed response, if any."""
    try:
        data = response.json()
    except ValueError:
        return ''
    if isinstance(data, dict):
        return data.get('message', '') or ''
    return ''


class GitHubClient:
    """
    Minimal read-only client for the repository endpoints used to compute a version.
    """

    def __init__(self, token: str, repository: str, api_url: str = DEFAULT_API_URL,
                 timeout: int = 30, session: Optional[requests.Session] = None):
        """
        Initialize the client.

        Args:
            token: GitHub token
            repository: Repository in "owner/name" form
            api_url: Base URL of the REST API (GitHub Enterprise uses its own)
            timeout: Per-request timeout in seconds
            session: Pre-configured session (created from the token if omitted)
        """
        self.repository = repository
        self.api_url = api_url.rstrip('/')
        self.timeout = timeout
        self.session = session or create_session(token)

    def _repo_url(self, path: str) -> str:
        return f'{self.api_url}/repos/{self.repository}/{path}'

    def _get(self, url: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        """
        Perform a GET request, converting transport and HTTP failures to GitHubAPIError.
        """
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response
        except requests.exceptions.HTTPError as e:
            status = getattr(e.response, 'status_code', 'unknown')
            detail = _error_detail(e.response) if e.response is not None else ''
            message = f'GitHub API request to {url} failed with status {status}'
            if detail:
                message = f'{message}: {detail}'
            raise GitHubAPIError(message) from e
        except requests.exceptions.Timeout as e:
            raise GitHubAPIError(f'GitHub API request to {url} timed out after {self.timeout} seconds') from e
        except requests.exceptions.RequestException as e:
            raise GitHubAPIError(f'GitHub API request to {url} failed: {e}') from e

    def _paginate(self, url: str, params: Optional[Dict[str, Any]] = None) -> Iterator[Dict[str, Any]]:
        """
        Yield items from a paginated list endpoint, one page at a time.

        Pages are requested only as the caller consumes items, following
        the Link header's rel="next" URL until it is absent.

        Args:
            url: First page URL
            params: Query parameters for the first page (later pages carry them in the URL)

        Yields:
            dict: Items of each page, in the order returned by the API
        """
        page_params = dict(params or {})
        page_params.setdefault('per_page', PER_PAGE)
        next_url = url
        page = 0

        while next_url:
            response = self._get(next_url, params=page_params)
            page += 1
            try:
                items = response.json()
            except ValueError as e:
                raise GitHubAPIError(f'Invalid JSON from GitHub API at {next_url}: {e}') from e
            if not isinstance(items, list):
                raise GitHubAPIError(f'Expected a list from GitHub API at {next_url}, got {type(items).__name__}')

            logger.debug(f'Fetched page {page} from {url} ({len(items)} items)')
            yield from items

            next_url = response.links.get('next', {}).get('url')
            page_params = None

    def get_commit(self, ref: str) -> CommitInfo:
        """
        Resolve metadata for a commit.

        Args:
            ref: Commit sha, branch or tag name

        Returns:
            CommitInfo: The commit's full sha and committer date

        Raises:
            GitHubAPIError: If the request fails or the payload is missing fields
        """
        url = self._repo_url(f'commits/{ref}')
        response = self._get(url)
        try:
            data = response.json()
            return CommitInfo(
                sha=data['sha'],
                committer_date=data['commit']['committer']['date'],
            )
        except ValueError as e:
            raise GitHubAPIError(f'Invalid JSON from GitHub API at {url}: {e}') from e
        except (KeyError, TypeError) as e:
            raise GitHubAPIError(f'Unexpected commit payload for {ref}: missing {e}') from e

    def list_tags(self) -> Iterator[TagRef]:
        """
        List every tag of the repository, in API listing order.

        Yields:
            TagRef: Tag name and the sha of the commit it references
        """
        for item in self._paginate(self._repo_url('tags')):
            try:
                yield TagRef(name=item['name'], commit_sha=item['commit']['sha'])
            except (KeyError, TypeError) as e:
                raise GitHubAPIError(f'Unexpected tag payload: missing {e}') from e

    def iter_commits(self, branch: str, until: str) -> Iterator[str]:
        """
        Iterate commit shas on a branch, newest first, lazily across pages.

        Args:
            branch: Branch name or sha to start listing from
            until: ISO 8601 timestamp; only commits at or before it are listed

        Yields:
            str: Commit sha
        """
        params = {'sha': branch, 'until': until}
        for item in self._paginate(self._repo_url('commits'), params):
            try:
                yield item['sha']
            except (KeyError, TypeError) as e:
                raise GitHubAPIError(f'Unexpected commit listing payload: missing {e}') from e
