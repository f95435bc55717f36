"""Git repository operations."""

import logging
from pathlib import Path

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo

logger = logging.getLogger(__name__)


class GitError(Exception):
    """Git operation error."""


def is_git_repository(path: Path) -> bool:
    """Check whether path is inside a non-bare git working tree."""
    try:
        return not Repo(path, search_parent_directories=True).bare
    except (InvalidGitRepositoryError, NoSuchPathError):
        return False


def _command_message(err: GitCommandError) -> str:
    """Extract the useful part of a failed git command's output."""
    stderr = (err.stderr or "").strip()
    if stderr.startswith("stderr:"):
        stderr = stderr[len("stderr:") :].strip()
    stderr = stderr.strip("'").strip()
    return stderr or str(err)


class GitRepo:
    """Git repository operations."""

    def __init__(self, path: Path) -> None:
        """Initialize repository."""
        try:
            self.repo: Repo = Repo(path, search_parent_directories=True)
            if self.repo.bare:
                raise GitError("Cannot operate on bare repository")
        except (GitCommandError, ValueError, InvalidGitRepositoryError, NoSuchPathError) as err:
            raise GitError(f"Failed to open repository: {err}") from err

    @property
    def working_dir(self) -> Path:
        return Path(self.repo.working_tree_dir)

    def _branch_refs(self, namespace: str) -> list[str]:
        """Names of the refs under namespace, with the namespace removed.

        Only real refs are listed, so a detached HEAD never shows up.
        """
        refs = self.repo.git.for_each_ref("--format=%(refname)", namespace).splitlines()
        names = []
        for ref in refs:
            ref = ref.strip()
            if not ref.startswith(namespace):
                continue
            name = ref[len(namespace) :]
            if name and name != "HEAD":
                names.append(name)
        return names

    def get_local_branches(self) -> list[str]:
        """Get all local branch names."""
        try:
            return self._branch_refs("refs/heads/")
        except GitCommandError as err:
            raise GitError(f"Failed to get local branches: {err}") from err

    def get_remote_branches(self, remote: str) -> list[str]:
        """Get branch names known on one remote, without the remote prefix."""
        try:
            return self._branch_refs(f"refs/remotes/{remote}/")
        except GitCommandError as err:
            raise GitError(f"Failed to get remote branches: {err}") from err

    def get_current_branch_name(self) -> str:
        """Get current branch name."""
        try:
            try:
                return self.repo.active_branch.name
            except TypeError:
                # Detached HEAD: no branch is checked out
                return ""
        except (GitCommandError, ValueError) as err:
            raise GitError(f"Failed to get current branch: {err}") from err

    def get_remotes(self) -> list[str]:
        """Get names of all configured remotes."""
        try:
            return [remote.name for remote in self.repo.remotes]
        except (GitCommandError, ValueError) as err:
            raise GitError(f"Failed to get remote repositories: {err}") from err

    def delete_local_branch(self, branch_name: str, force: bool = False) -> None:
        """Delete a local branch.

        Without force git refuses to delete branches that are not fully merged.

        Raises:
            GitError: If git refuses or fails to delete the branch
        """
        try:
            self.repo.git.branch("-D" if force else "-d", branch_name)
        except GitCommandError as err:
            raise GitError(_command_message(err)) from err
        logger.debug("Deleted local branch %s (force=%s)", branch_name, force)

    def delete_remote_branch(self, branch_name: str, remote: str) -> None:
        """Delete a branch on a remote by pushing a delete refspec.

        Raises:
            GitError: If the push fails
        """
        try:
            self.repo.git.push(remote, "--delete", branch_name)
        except GitCommandError as err:
            raise GitError(_command_message(err)) from err
        logger.debug("Deleted remote branch %s/%s", remote, branch_name)
