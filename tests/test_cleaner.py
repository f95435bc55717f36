"""Tests for the deletion orchestration, against a scripted repository."""

from typing import Optional

import pytest

from git_cleaner.cleaner import (
    BRANCH_MISSING_ERROR,
    CURRENT_BRANCH_ERROR,
    NETWORK_ERROR,
    PERMISSION_ERROR,
    DeletionOutcome,
    delete_local_branches,
    delete_remote_branches,
    normalize_remote_error,
)
from git_cleaner.git import GitError


class FakeRepo:
    """Repository double that records calls and fails on request."""

    def __init__(
        self,
        current: str = "main",
        remotes: Optional[list[str]] = None,
        failures: Optional[dict[str, str]] = None,
        unmerged: Optional[set[str]] = None,
    ) -> None:
        self.current = current
        self.remotes = ["origin"] if remotes is None else remotes
        self.failures = failures or {}
        self.unmerged = unmerged or set()
        self.deleted_local: list[tuple[str, bool]] = []
        self.deleted_remote: list[tuple[str, str]] = []
        self.current_calls = 0

    def get_current_branch_name(self) -> str:
        self.current_calls += 1
        return self.current

    def get_remotes(self) -> list[str]:
        return list(self.remotes)

    def delete_local_branch(self, branch_name: str, force: bool = False) -> None:
        if branch_name in self.failures:
            raise GitError(self.failures[branch_name])
        if branch_name in self.unmerged and not force:
            raise GitError(f"error: The branch '{branch_name}' is not fully merged.")
        self.deleted_local.append((branch_name, force))

    def delete_remote_branch(self, branch_name: str, remote: str) -> None:
        if branch_name in self.failures:
            raise GitError(self.failures[branch_name])
        self.deleted_remote.append((branch_name, remote))


def test_delete_local_branches_success() -> None:
    repo = FakeRepo()
    outcomes = delete_local_branches(repo, ["feature/a", "feature/b"])
    assert outcomes == [DeletionOutcome("feature/a", True), DeletionOutcome("feature/b", True)]
    assert repo.deleted_local == [("feature/a", False), ("feature/b", False)]


def test_current_branch_never_deleted() -> None:
    """Test that the checked-out branch is reported, not deleted."""
    repo = FakeRepo(current="feature/b")
    outcomes = delete_local_branches(repo, ["feature/a", "feature/b", "feature/c"], force=True)

    assert outcomes[1] == DeletionOutcome("feature/b", False, CURRENT_BRANCH_ERROR)
    assert [name for name, _ in repo.deleted_local] == ["feature/a", "feature/c"]
    assert repo.current_calls == 1


def test_unmerged_branch_needs_force() -> None:
    repo = FakeRepo(unmerged={"feature/wip"})

    outcomes = delete_local_branches(repo, ["feature/wip"])
    assert not outcomes[0].success
    assert "not fully merged" in outcomes[0].error

    outcomes = delete_local_branches(repo, ["feature/wip"], force=True)
    assert outcomes == [DeletionOutcome("feature/wip", True)]
    assert repo.deleted_local == [("feature/wip", True)]


def test_local_failure_does_not_stop_batch() -> None:
    """Test that outcomes keep input order whatever fails."""
    repo = FakeRepo(current="b2", failures={"b1": "error: boom"})
    outcomes = delete_local_branches(repo, ["b1", "b2", "b3"])

    assert [o.branch for o in outcomes] == ["b1", "b2", "b3"]
    assert [o.success for o in outcomes] == [False, False, True]
    assert outcomes[0].error == "error: boom"


def test_delete_local_branches_empty() -> None:
    assert delete_local_branches(FakeRepo(), []) == []


def test_delete_remote_branches_success() -> None:
    repo = FakeRepo(remotes=["origin", "upstream"])
    outcomes = delete_remote_branches(repo, ["feature/a", "feature/b"], "upstream")
    assert all(outcome.success for outcome in outcomes)
    assert repo.deleted_remote == [("feature/a", "upstream"), ("feature/b", "upstream")]


def test_missing_remote_fails_whole_batch() -> None:
    """Test that an unknown remote raises before any deletion."""
    repo = FakeRepo(remotes=["origin"])
    with pytest.raises(GitError, match="Remote repository 'upstream' does not exist"):
        delete_remote_branches(repo, ["feature/a"], "upstream")
    assert repo.deleted_remote == []


def test_remote_failures_are_normalized_and_isolated() -> None:
    repo = FakeRepo(
        failures={
            "gone": "error: unable to delete 'gone': remote ref does not exist",
            "locked": "remote: Permission denied to user.",
            "offline": "fatal: unable to access: Could not resolve host: example.com",
            "weird": "something unexpected",
        }
    )
    outcomes = delete_remote_branches(repo, ["gone", "ok", "locked", "offline", "weird"])

    assert [o.branch for o in outcomes] == ["gone", "ok", "locked", "offline", "weird"]
    assert [o.error for o in outcomes] == [
        BRANCH_MISSING_ERROR,
        None,
        PERMISSION_ERROR,
        NETWORK_ERROR,
        "something unexpected",
    ]
    assert repo.deleted_remote == [("ok", "origin")]


@pytest.mark.parametrize(
    ("message", "expected"),
    [
        ("error: unable to delete 'x': remote ref does not exist", BRANCH_MISSING_ERROR),
        ("ERROR: Permission denied (publickey)", PERMISSION_ERROR),
        ("remote: 403 Forbidden", PERMISSION_ERROR),
        ("The requested URL returned error: 403", PERMISSION_ERROR),
        ("ssh: connect to host example.com port 22: Connection refused", NETWORK_ERROR),
        ("fatal: network is unreachable", NETWORK_ERROR),
        ("Operation timed out", NETWORK_ERROR),
        ("hook declined to update refs/heads/x", "hook declined to update refs/heads/x"),
    ],
)
def test_normalize_remote_error(message: str, expected: str) -> None:
    assert normalize_remote_error(message) == expected
