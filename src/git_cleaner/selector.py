"""Branch selection by glob patterns and whitelist."""

import logging
import re
from dataclasses import dataclass
from fnmatch import fnmatchcase
from typing import Iterable, Protocol, Sequence

from git_cleaner.git import GitError

logger = logging.getLogger(__name__)

_BRACE = re.compile(r"\{([^{}]*,[^{}]*)\}")


class BranchLister(Protocol):
    """Read side of a repository, as needed for a preview."""

    def get_local_branches(self) -> list[str]: ...

    def get_remote_branches(self, remote: str) -> list[str]: ...

    def get_remotes(self) -> list[str]: ...


@dataclass(frozen=True)
class PreviewResult:
    """Branches slated for deletion in each namespace."""

    local: tuple[str, ...] = ()
    remote: tuple[str, ...] = ()

    @property
    def total(self) -> int:
        return len(self.local) + len(self.remote)

    @property
    def is_empty(self) -> bool:
        return self.total == 0


def expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` alternatives into separate patterns.

    >>> expand_braces("{feature,fix}/*")
    ['feature/*', 'fix/*']
    """
    match = _BRACE.search(pattern)
    if match is None:
        return [pattern]
    head, tail = pattern[: match.start()], pattern[match.end() :]
    expanded = []
    for option in match.group(1).split(","):
        expanded.extend(expand_braces(f"{head}{option}{tail}"))
    return expanded


def matches(branch: str, pattern: str) -> bool:
    """Check a branch name against one glob pattern.

    Matching is case-sensitive and covers the whole name. ``*`` also matches
    ``/`` so ``feature/*`` catches ``feature/a/b``.
    """
    return any(fnmatchcase(branch, expanded) for expanded in expand_braces(pattern))


def matches_any(branch: str, patterns: Iterable[str]) -> bool:
    return any(matches(branch, pattern) for pattern in patterns)


def select_branches(branches: Sequence[str], patterns: Sequence[str], whitelist: Sequence[str] = ()) -> list[str]:
    """Select branches matching any pattern and no whitelist entry.

    No patterns selects nothing. Whitelisted branches are never selected, no
    matter how specific the inclusion pattern is.
    """
    if not patterns:
        return []

    selected: list[str] = []
    seen: set[str] = set()
    for pattern in patterns:
        for branch in branches:
            if branch not in seen and matches(branch, pattern):
                seen.add(branch)
                selected.append(branch)

    return [branch for branch in selected if not matches_any(branch, whitelist)]


def preview_deletion(
    repo: BranchLister,
    patterns: Sequence[str],
    whitelist: Sequence[str] = (),
    include_local: bool = False,
    include_remote: bool = False,
    remote: str = "origin",
) -> PreviewResult:
    """Compute the branches that a clean run would delete.

    Raises:
        GitError: If remote branches are requested and remote is not configured
    """
    local: list[str] = []
    remote_branches: list[str] = []

    if include_local:
        local = select_branches(repo.get_local_branches(), patterns, whitelist)
        logger.debug("Selected %d local branch(es): %s", len(local), local)

    if include_remote:
        if remote not in repo.get_remotes():
            raise GitError(f"Remote repository '{remote}' does not exist")
        remote_branches = select_branches(repo.get_remote_branches(remote), patterns, whitelist)
        logger.debug("Selected %d branch(es) on %s: %s", len(remote_branches), remote, remote_branches)

    return PreviewResult(local=tuple(local), remote=tuple(remote_branches))
