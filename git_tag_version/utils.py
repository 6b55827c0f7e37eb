"""
Utility functions for Git Tag Version.

Contains CI environment detection and GitHub Actions workflow command
helpers that are reused across different modules in the application.
"""

import os
import sys
from typing import Optional

from loguru import logger

BRANCH_REF_PREFIX = 'refs/heads/'


def is_github_actions() -> bool:
    """Check if running inside a GitHub Actions runner."""
    return os.environ.get('GITHUB_ACTIONS', '').strip().lower() == 'true'


def branch_from_ref(ref: str, fallback: str) -> str:
    """
    Derive the commit listing start point from a git ref.

    Branch refs (refs/heads/main) list commits from the branch name. Any other
    ref (tags, pull request merge refs) or an empty ref falls back to the given
    value, normally the current commit sha.

    Args:
        ref: Full git ref, e.g. "refs/heads/feature/x"
        fallback: Value to use when the ref is not a branch ref

    Returns:
        str: Branch name or the fallback
    """
    if ref and ref.startswith(BRANCH_REF_PREFIX):
        return ref[len(BRANCH_REF_PREFIX):]
    return fallback


def escape_command_data(value: str) -> str:
    """Escape a value for use as workflow command data."""
    return value.replace('%', '%25').replace('\r', '%0D').replace('\n', '%0A')


def set_output(name: str, value: str, output_file: Optional[str] = None) -> None:
    """
    Publish a step output.

    Appends "name=value" to the GITHUB_OUTPUT file when one is configured,
    otherwise prints the same line to stdout so local runs stay usable.

    Args:
        name: Output name
        value: Output value (single line)
        output_file: Path to the GITHUB_OUTPUT file, or None

    Raises:
        ValueError: If the value spans multiple lines
        OSError: If the output file cannot be written
    """
    if '\n' in value or '\r' in value:
        raise ValueError(f"Output '{name}' must be a single line")

    line = f'{name}={value}\n'
    if output_file:
        with open(output_file, 'a', encoding='utf-8') as f:
            f.write(line)
        logger.debug(f"Wrote output '{name}' to {output_file}")
    else:
        sys.stdout.write(line)
        sys.stdout.flush()


def set_failed(message: str) -> None:
    """Mark the workflow step as failed with an error annotation."""
    sys.stdout.write(f'::error::{escape_command_data(message)}\n')
    sys.stdout.flush()
