"""
Command-line interface for Git Tag Version.

Main entry point that orchestrates all components: configuration,
GitHub API access, version resolution, and step output.
"""

import argparse
import sys
from typing import Optional

from loguru import logger
from rich.console import Console

from .config import Config, load_config, VALID_LOG_LEVELS
from .github_client import GitHubClient
from .logging_config import setup_logging
from .utils import branch_from_ref, set_failed, set_output
from .versioning import (
    TagIndex,
    find_release_version,
    release_version_from_ref,
    resolve_version,
    walk_history,
)

# stdout is reserved for workflow commands and outputs
console = Console(stderr=True)


def parse_arguments(argv=None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description='Compute a semantic build version from GitHub tags and commit history'
    )

    # GitHub API access
    parser.add_argument('--github-token', help='GitHub token for API access (default: GITHUB_TOKEN)')
    parser.add_argument('--repository', help='Repository in owner/name form (default: GITHUB_REPOSITORY)')
    parser.add_argument('--api-url', help='GitHub REST API URL (default: GITHUB_API_URL or https://api.github.com)')
    parser.add_argument('--timeout', type=int, help='GitHub API timeout in seconds (default: 30)')

    # Workflow run context
    parser.add_argument('--sha', help='Commit sha to compute the version for (default: GITHUB_SHA)')
    parser.add_argument('--ref', help='Git ref of the run, e.g. refs/heads/main (default: GITHUB_REF)')
    parser.add_argument('--event-name', help='Event that triggered the run (default: GITHUB_EVENT_NAME)')

    # Version rules
    parser.add_argument('--labels', help='Label suffix rule as "<label>,<cleanMarker>", e.g. "-SNAPSHOT,-clean" (default: INPUT_LABELS)')

    # Output
    parser.add_argument('--output-file', help='File to append the version output to (default: GITHUB_OUTPUT, else stdout)')

    # Logging
    parser.add_argument('--log-level', type=str.upper, choices=VALID_LOG_LEVELS, help='Logging level (default: INFO)')

    return parser.parse_args(argv)


def determine_version(config: Config, client: Optional[GitHubClient] = None) -> str:
    """
    Compute the build version for the configured commit.

    Args:
        config: Validated configuration
        client: GitHub client to use (created from the config if omitted)

    Returns:
        str: Computed version

    Raises:
        GitHubAPIError: If commit or tag data cannot be fetched
        MalformedTagError: If the reported tag cannot be used for arithmetic
    """
    # A pushed release/ tag is authoritative, no API access needed
    version = release_version_from_ref(config.event_name, config.ref)
    if version is not None:
        logger.info(f'Computed version from release tag: {version}')
        return version

    if client is None:
        client = GitHubClient(
            config.github_token,
            config.repository,
            api_url=config.api_url,
            timeout=config.timeout,
        )

    logger.info(f'Listing tags of {config.repository}...')
    tag_index = TagIndex(client.list_tags())
    logger.debug(f'Indexed tags on {len(tag_index)} commits')

    # Tags are keyed by full sha, config.sha may be abbreviated
    commit = client.get_commit(config.sha)

    version = find_release_version(tag_index.tags_for(commit.sha))
    if version is not None:
        logger.info(f'Computed version from release tag: {version}')
        return version

    branch = branch_from_ref(config.ref, commit.sha)
    logger.debug(f'Walking history of {branch} until {commit.committer_date}')

    walk = walk_history(client.iter_commits(branch, commit.committer_date), tag_index, config.labels)
    if walk.tag is None:
        logger.info(f'No tag found in {walk.offset} commits, using fallback version')
    else:
        logger.info(f'Found tag {walk.tag} at offset {walk.offset}')

    version = resolve_version(walk, config.labels)
    logger.info(f'Computed version is: {version}')
    return version


def main(argv=None) -> None:
    """Main entry point for the application."""
    # Set up logging with default level first
    setup_logging(console=console)

    args = parse_arguments(argv)
    if args.log_level:
        setup_logging(args.log_level, console=console)

    try:
        config = load_config(args)
        setup_logging(config.log_level, console=console)

        version = determine_version(config)
        set_output('version', version, config.output_file)
    except Exception as e:
        logger.error(f'Failed to compute version: {e}')
        set_failed(str(e))
        sys.exit(1)


if __name__ == '__main__':
    main()
