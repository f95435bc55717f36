"""Branch deletion with per-branch outcomes."""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

from git_cleaner.git import GitError

logger = logging.getLogger(__name__)

CURRENT_BRANCH_ERROR = "Cannot delete current branch"
BRANCH_MISSING_ERROR = "Branch does not exist"
PERMISSION_ERROR = "Insufficient permissions"
NETWORK_ERROR = "Network connection failed"

# Checked in order against the lowercased git output
_REMOTE_ERROR_HINTS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (BRANCH_MISSING_ERROR, ("does not exist",)),
    (PERMISSION_ERROR, ("permission denied", "forbidden", "returned error: 403")),
    (NETWORK_ERROR, ("network", "connection", "could not resolve host", "timed out")),
)


class BranchDeleter(Protocol):
    """Write side of a repository, as needed for a clean run."""

    def get_current_branch_name(self) -> str: ...

    def get_remotes(self) -> list[str]: ...

    def delete_local_branch(self, branch_name: str, force: bool = False) -> None: ...

    def delete_remote_branch(self, branch_name: str, remote: str) -> None: ...


@dataclass(frozen=True)
class DeletionOutcome:
    """Result of one attempted branch deletion."""

    branch: str
    success: bool
    error: Optional[str] = None


def normalize_remote_error(message: str) -> str:
    """Map git push output to a short, user-facing reason."""
    lowered = message.lower()
    for reason, hints in _REMOTE_ERROR_HINTS:
        if any(hint in lowered for hint in hints):
            return reason
    return message


def delete_local_branches(repo: BranchDeleter, branches: Sequence[str], force: bool = False) -> list[DeletionOutcome]:
    """Delete local branches one at a time.

    The checked-out branch is never handed to git; it is reported as failed.
    A branch git refuses to delete does not stop the remaining ones.
    """
    current = repo.get_current_branch_name()
    outcomes = []
    for branch in branches:
        if branch == current:
            outcomes.append(DeletionOutcome(branch, False, CURRENT_BRANCH_ERROR))
            continue
        try:
            repo.delete_local_branch(branch, force=force)
        except GitError as err:
            logger.debug("Could not delete local branch %s: %s", branch, err)
            outcomes.append(DeletionOutcome(branch, False, str(err)))
        else:
            outcomes.append(DeletionOutcome(branch, True))
    return outcomes


def delete_remote_branches(repo: BranchDeleter, branches: Sequence[str], remote: str = "origin") -> list[DeletionOutcome]:
    """Delete branches on one remote, one at a time.

    Raises:
        GitError: If remote is not configured; nothing is attempted then
    """
    if remote not in repo.get_remotes():
        raise GitError(f"Remote repository '{remote}' does not exist")

    outcomes = []
    for branch in branches:
        try:
            repo.delete_remote_branch(branch, remote)
        except GitError as err:
            logger.debug("Could not delete %s/%s: %s", remote, branch, err)
            outcomes.append(DeletionOutcome(branch, False, normalize_remote_error(str(err))))
        else:
            outcomes.append(DeletionOutcome(branch, True))
    return outcomes
