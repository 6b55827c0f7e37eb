"""
Configuration management for Git Tag Version.

Handles environment variable loading, validation, and provides a centralized
configuration object that is passed explicitly into the version computation.
"""

import os
import re
from dataclasses import dataclass
from typing import List, Optional
from dotenv import load_dotenv
from loguru import logger

from .github_client import DEFAULT_API_URL
from .utils import is_github_actions
from .versioning import LabelConfig, parse_label_config

# Load environment variables from .env file
load_dotenv()

VALID_LOG_LEVELS = ['DEBUG', 'VERBOSE', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
REPOSITORY_PATTERN = re.compile(r'^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$')


class ConfigurationError(ValueError):
    """Raised when required configuration is missing or invalid."""


def get_config_value(cli_args, field_name: str, env_key: str, default, value_type: type = str):
    """
    Get configuration value with proper precedence: CLI args > env vars > defaults.

    Args:
        cli_args: CLI arguments object or None
        field_name: Name of the CLI argument field
        env_key: Environment variable key
        default: Default value if neither CLI nor env var is set
        value_type: Type to convert the value to (str or int)

    Returns:
        The configuration value converted to the specified type
    """
    cli_value = getattr(cli_args, field_name, None) if cli_args else None
    if cli_value is not None:
        return cli_value

    env_value = os.environ.get(env_key, '')
    if not env_value:
        return default

    try:
        return value_type(env_value)
    except (ValueError, TypeError):
        return default


def get_config_value_str(cli_args, field_name: str, env_key: str, default: str = '') -> str:
    """Get string configuration value."""
    return get_config_value(cli_args, field_name, env_key, default, str)


def get_config_value_int(cli_args, field_name: str, env_key: str, default: int = 0) -> int:
    """Get integer configuration value."""
    return get_config_value(cli_args, field_name, env_key, default, int)


@dataclass
class Config:
    """Configuration object containing all settings for one version computation."""

    # GitHub API access
    github_token: str
    repository: str
    api_url: str
    timeout: int

    # Workflow run context
    sha: str
    ref: str
    event_name: str

    # Version rules
    labels: Optional[LabelConfig]

    # Output and logging
    output_file: str
    log_level: str


def _hint(cli_flag: str, env_key: str) -> str:
    if is_github_actions():
        return f'set {env_key} in the workflow environment'
    return f'use {cli_flag} or set {env_key} environment variable'


def _validate_github_config(github_token: str, repository: str, sha: str, api_url: str,
                            missing_params: List[str], validation_errors: List[str]) -> None:
    """
    Validate GitHub access and run context parameters.

    Args:
        github_token: GitHub API token
        repository: Repository in "owner/name" form
        sha: Current commit sha
        api_url: GitHub REST API base URL
        missing_params: List to append missing parameter errors
        validation_errors: List to append validation errors
    """
    if not github_token:
        missing_params.append(f'GITHUB_TOKEN is required ({_hint("--github-token", "GITHUB_TOKEN")})')

    if not repository:
        missing_params.append(f'GITHUB_REPOSITORY is required ({_hint("--repository", "GITHUB_REPOSITORY")})')
    elif not REPOSITORY_PATTERN.match(repository):
        validation_errors.append(f'GITHUB_REPOSITORY must be in the form owner/name (got: {repository})')

    if not sha:
        missing_params.append(f'GITHUB_SHA is required ({_hint("--sha", "GITHUB_SHA")})')

    if not api_url.startswith(('http://', 'https://')):
        validation_errors.append(f'GITHUB_API_URL must start with http:// or https:// (got: {api_url})')


def load_config(cli_args=None) -> Config:
    """
    Load and validate configuration from CLI arguments and environment variables.
    CLI arguments take precedence over environment variables.

    Args:
        cli_args: Parsed CLI arguments or None

    Returns:
        Config: Validated configuration object

    Raises:
        ConfigurationError: If required configuration is missing or invalid
    """
    github_token = get_config_value_str(cli_args, 'github_token', 'GITHUB_TOKEN', '').strip()
    repository = get_config_value_str(cli_args, 'repository', 'GITHUB_REPOSITORY', '').strip()
    api_url = get_config_value_str(cli_args, 'api_url', 'GITHUB_API_URL', DEFAULT_API_URL).strip()
    timeout = get_config_value_int(cli_args, 'timeout', 'GITHUB_TIMEOUT', 30)

    sha = get_config_value_str(cli_args, 'sha', 'GITHUB_SHA', '').strip()
    ref = get_config_value_str(cli_args, 'ref', 'GITHUB_REF', '').strip()
    event_name = get_config_value_str(cli_args, 'event_name', 'GITHUB_EVENT_NAME', '').strip()

    # Action inputs are exposed to the process as INPUT_<NAME>
    labels_value = get_config_value_str(cli_args, 'labels', 'INPUT_LABELS', '')
    output_file = get_config_value_str(cli_args, 'output_file', 'GITHUB_OUTPUT', '').strip()

    # Handle log_level (case insensitive)
    log_level = get_config_value_str(cli_args, 'log_level', 'LOG_LEVEL', 'INFO').upper()

    missing_params = []
    validation_errors = []

    if log_level not in VALID_LOG_LEVELS:
        validation_errors.append(f'LOG_LEVEL must be one of {VALID_LOG_LEVELS} (got: {log_level})')

    if timeout < 1 or timeout > 300:
        validation_errors.append(f'GITHUB_TIMEOUT must be between 1-300 seconds (got: {timeout})')

    _validate_github_config(github_token, repository, sha, api_url, missing_params, validation_errors)

    labels = None
    try:
        labels = parse_label_config(labels_value)
    except ValueError as e:
        validation_errors.append(str(e))

    problems = missing_params + validation_errors
    if problems:
        logger.error('❌ Configuration Error:')
        for i, error_msg in enumerate(problems, 1):
            logger.error(f'   {i}. {error_msg}')
        raise ConfigurationError('; '.join(problems))

    config = Config(
        github_token=github_token,
        repository=repository,
        api_url=api_url,
        timeout=timeout,
        sha=sha,
        ref=ref,
        event_name=event_name,
        labels=labels,
        output_file=output_file,
        log_level=log_level,
    )

    # Output debug information
    logger.debug(f'GITHUB_TOKEN = {"*" * 10}...{"*" * 10}')  # Mask token for security
    logger.debug(f'GITHUB_REPOSITORY = {config.repository}')
    logger.debug(f'GITHUB_API_URL = {config.api_url}')
    logger.debug(f'GITHUB_TIMEOUT = {config.timeout}')
    logger.debug(f'GITHUB_SHA = {config.sha}')
    logger.debug(f'GITHUB_REF = {config.ref}')
    logger.debug(f'GITHUB_EVENT_NAME = {config.event_name}')
    logger.debug(f'LABELS = {config.labels}')
    logger.debug(f'GITHUB_OUTPUT = {config.output_file or "(stdout)"}')

    return config
