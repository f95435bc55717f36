"""Test configuration and fixtures."""

from pathlib import Path
from typing import Generator

import pytest
from git import Actor, Repo


@pytest.fixture(autouse=True)
def config_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep the global config file out of the real home directory."""
    home = tmp_path / "config-home"
    monkeypatch.setenv("GIT_CLEANER_HOME", str(home))
    return home


@pytest.fixture
def test_env(tmp_path: Path) -> Generator[tuple[Path, Path], None, None]:
    """Create a test environment with local and remote repositories.

    Local branches: main, develop, release/1.0, feature/merged,
    feature/unmerged (pushed), feature/wip (never pushed, unmerged) and
    feature/current (checked out). The remote additionally has
    feature/remote, which does not exist locally.

    Returns:
        Tuple of (local_repo_path, remote_repo_path)
    """
    remote_path = tmp_path / "remote"
    local_path = tmp_path / "local"
    remote_path.mkdir()
    local_path.mkdir()

    Repo.init(remote_path, bare=True, initial_branch="main")
    local_repo = Repo.init(local_path, initial_branch="main")

    author = Actor("Test User", "test@example.com")
    local_repo.config_writer().set_value("user", "name", author.name).release()
    local_repo.config_writer().set_value("user", "email", author.email).release()

    readme = local_path / "README.md"
    readme.write_text("# Test Repository")
    local_repo.index.add(["README.md"])
    local_repo.index.commit("Initial commit", author=author)
    main_branch = local_repo.heads.main

    origin = local_repo.create_remote("origin", url=str(remote_path))
    origin.push("main")
    main_branch.set_tracking_branch(origin.refs.main)

    def create_branch(name: str, content: str, push: bool = True, merge: bool = False) -> None:
        """Create a branch off main with one commit."""
        main_branch.checkout()
        branch = local_repo.create_head(name)
        branch.checkout()

        file_name = f"{name.replace('/', '_')}.txt"
        (local_path / file_name).write_text(content)
        local_repo.index.add([file_name])
        local_repo.index.commit(f"Add {name}", author=author)

        if push:
            origin.push(name)
            branch.set_tracking_branch(origin.refs[name])

        if merge:
            main_branch.checkout()
            local_repo.git.merge(name, "--no-ff")
            origin.push("main")

    create_branch("feature/merged", "Merged branch content", merge=True)
    create_branch("feature/unmerged", "Unmerged branch content")
    create_branch("feature/wip", "Work in progress", push=False)

    for name in ("develop", "release/1.0"):
        local_repo.create_head(name, "main")
        origin.push(name)

    # Branch that only exists on the remote
    create_branch("feature/remote", "Remote branch content")
    main_branch.checkout()
    local_repo.delete_head("feature/remote", force=True)

    create_branch("feature/current", "Current branch content")

    yield local_path, remote_path


@pytest.fixture
def test_repo(test_env: tuple[Path, Path]) -> Path:
    local_path, _ = test_env
    return local_path
