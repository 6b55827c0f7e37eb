"""
Version resolution from tags and commit history.

Contains the release tag short-circuit, the history walker that finds the
most recent reachable tag and the commit offset to it, and the composer that
turns a tag and offset into the final version string.
"""

import re
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

from loguru import logger

from .github_client import TagRef
from .logging_config import VERBOSE

RELEASE_TAG_PREFIX = 'release/'
RELEASE_REF_PREFIX = 'refs/tags/' + RELEASE_TAG_PREFIX
FALLBACK_VERSION_PREFIX = '1.0.'
MIN_VERSION_COMPONENTS = 3

_LEADING_DIGITS = re.compile(r'^(\d+)')


class MalformedTagError(ValueError):
    """Raised when a tag cannot be used for version arithmetic."""


@dataclass(frozen=True)
class LabelConfig:
    """Suffix rule for builds that are not based on a clean tag."""
    label: str
    clean_marker: str


@dataclass(frozen=True)
class WalkResult:
    """Outcome of walking the commit history."""
    tag: Optional[str]
    offset: int
    found_clean: bool = False


def parse_label_config(value: Optional[str]) -> Optional[LabelConfig]:
    """
    Parse a "<label>,<cleanMarker>" string.

    Args:
        value: Raw configuration string

    Returns:
        LabelConfig, or None when the value is empty

    Raises:
        ValueError: If the value is set but has no comma-separated clean marker
    """
    if not value or not value.strip():
        return None

    label, sep, clean_marker = value.partition(',')
    if not sep:
        raise ValueError(f"labels must be in the form '<label>,<cleanMarker>' (got: {value})")

    label = label.strip()
    clean_marker = clean_marker.strip()
    if not clean_marker:
        raise ValueError(f"labels clean marker must not be empty (got: {value})")

    return LabelConfig(label=label, clean_marker=clean_marker)


class TagIndex:
    """
    Read-only lookup of tag names by commit sha.

    Tag names keep the order in which the API listed them, which decides
    the winner when several tags reference one commit.
    """

    def __init__(self, tags: Iterable[TagRef]):
        index: Dict[str, list] = {}
        for tag in tags:
            index.setdefault(tag.commit_sha, []).append(tag.name)
        self._index: Dict[str, Tuple[str, ...]] = {sha: tuple(names) for sha, names in index.items()}

    def __len__(self) -> int:
        return len(self._index)

    def tags_for(self, sha: str) -> Tuple[str, ...]:
        """All tag names referencing a commit, in listing order."""
        return self._index.get(sha, ())

    def tag_for(self, sha: str) -> Optional[str]:
        """The first listed tag name referencing a commit, if any."""
        names = self._index.get(sha)
        return names[0] if names else None


def release_version_from_ref(event_name: str, ref: str) -> Optional[str]:
    """
    Version for a push of a release/ tag, read straight from the ref.

    Args:
        event_name: Event that triggered the workflow (e.g. "push")
        ref: Full git ref (e.g. "refs/tags/release/2.4.0")

    Returns:
        str: The part after "refs/tags/release/", or None
    """
    if event_name == 'push' and ref and ref.startswith(RELEASE_REF_PREFIX):
        return ref[len(RELEASE_REF_PREFIX):]
    return None


def find_release_version(tag_names: Iterable[str]) -> Optional[str]:
    """
    Version from the first release/ tag among the given names.

    Args:
        tag_names: Tag names of the current commit, in listing order

    Returns:
        str: The part after "release/", or None if no release tag exists
    """
    for name in tag_names:
        if name.startswith(RELEASE_TAG_PREFIX):
            return name[len(RELEASE_TAG_PREFIX):]
    return None


def walk_history(commits: Iterable[str], tag_index: TagIndex,
                 labels: Optional[LabelConfig] = None) -> WalkResult:
    """
    Walk commits newest first until a reportable tag is found.

    Every untagged commit adds one to the offset. Without a label config the
    first tagged commit ends the walk. With one, the first tag ending in the
    clean marker is recorded and skipped (without counting it), and the walk
    ends at the next tagged commit.

    Args:
        commits: Commit shas, newest first; consumed lazily
        tag_index: Tags by commit sha
        labels: Optional label config

    Returns:
        WalkResult: Reported tag (None if history ran out), offset and clean flag
    """
    offset = 0
    found_clean = False

    for sha in commits:
        tag = tag_index.tag_for(sha)
        if tag is None:
            offset += 1
            continue

        if labels is not None and not found_clean and tag.endswith(labels.clean_marker):
            found_clean = True
            logger.info(f'Found clean tag: {tag}')
            continue

        return WalkResult(tag=tag, offset=offset, found_clean=found_clean)

    return WalkResult(tag=None, offset=offset, found_clean=found_clean)


def _add_offset(component: str, offset: int, tag: str) -> str:
    match = _LEADING_DIGITS.match(component)
    if not match:
        raise MalformedTagError(
            f"Malformed tag '{tag}': last version component '{component}' is not numeric"
        )
    return str(int(match.group(1)) + offset)


def compose_version(tag: str, offset: int) -> str:
    """
    Build a version string from a tag and a commit offset.

    The leading "v" is dropped and anything from the first "-" on is kept as a
    classifier. Tags with fewer than three components get the offset appended
    as a new component; otherwise the offset is added to the last one.

    Examples:
        compose_version("v1.2.3", 0)      -> "1.2.3"
        compose_version("1.2", 5)         -> "1.2.5"
        compose_version("v2.0.0-beta", 3) -> "2.0.3-beta"

    Args:
        tag: Tag name
        offset: Number of commits since the tagged commit

    Returns:
        str: Version string

    Raises:
        MalformedTagError: If the last of three or more components has no leading digits
    """
    base = tag[1:] if tag.startswith('v') else tag

    classifier = ''
    if '-' in base:
        base, _, suffix = base.partition('-')
        classifier = '-' + suffix
        logger.info(f'Found classifier to append: {suffix}')

    parts = base.split('.')
    for part in parts:
        if not _LEADING_DIGITS.match(part):
            logger.warning(f'Invalid tag component: {part!r} must begin with a numeric digit.')

    logger.log(VERBOSE, f'Found version parts: {", ".join(parts)}')
    if len(parts) < MIN_VERSION_COMPONENTS:
        parts.append(str(offset))
    else:
        parts[-1] = _add_offset(parts[-1], offset, tag)

    return '.'.join(parts) + classifier


def resolve_version(walk: WalkResult, labels: Optional[LabelConfig] = None) -> str:
    """
    Turn a walk result into the final version, including the label suffix.

    Args:
        walk: Result of walk_history
        labels: Optional label config

    Returns:
        str: Version string
    """
    if walk.tag is None:
        version = f'{FALLBACK_VERSION_PREFIX}{walk.offset}'
    else:
        version = compose_version(walk.tag, walk.offset)

    if labels is not None and not walk.found_clean:
        version += labels.label

    return version
