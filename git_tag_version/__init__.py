"""
Git Tag Version

Computes a build version for CI runs from the most recent reachable git tag,
the number of commits since that tag, and optional label suffix rules.
"""

from ._version import __version__

__author__ = "git-tag-version contributors"
__description__ = "Compute a semantic build version from GitHub tags and commit history"
