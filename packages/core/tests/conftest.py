"""Shared fixtures: small throwaway git repositories with a fixed history."""

import os
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

import pytest

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available")


@dataclass
class GitRepo:
    path: Path
    commits: dict = field(default_factory=dict)  # label -> full hash


def _git(cwd: Path, *args: str, env: dict | None = None) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        env={**os.environ, **(env or {})},
        check=True,
        capture_output=True,
        text=True,
    )
    return result.stdout


def _commit(repo: GitRepo, label: str, message: str, author: str, email: str, date: str, files: dict) -> None:
    for name, content in files.items():
        target = repo.path / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content)
        _git(repo.path, "add", name)
    env = {
        "GIT_AUTHOR_NAME": author,
        "GIT_AUTHOR_EMAIL": email,
        "GIT_AUTHOR_DATE": date,
        "GIT_COMMITTER_NAME": author,
        "GIT_COMMITTER_EMAIL": email or "committer@example.com",
        "GIT_COMMITTER_DATE": date,
    }
    _git(repo.path, "commit", "-q", "-m", message, env=env)
    repo.commits[label] = _git(repo.path, "rev-parse", "HEAD").strip()


@pytest.fixture(autouse=True)
def _isolated_git_config(monkeypatch, tmp_path):
    """Keep the developer's global git config (signing, hooks, ...) out of the tests."""
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", os.devnull)
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path.parent))


@pytest.fixture
def empty_repo(tmp_path) -> GitRepo:
    if shutil.which("git") is None:
        pytest.skip("git executable not available")
    path = tmp_path / "empty"
    path.mkdir()
    _git(path, "init", "-q")
    _git(path, "symbolic-ref", "HEAD", "refs/heads/main")
    return GitRepo(path=path)


@pytest.fixture
def history_repo(empty_repo) -> GitRepo:
    """Four commits by two authors over three files, plus a `feature` branch.

    c1  Alice  Add app module    app.py (+3), README.md (+1)
    c2  Bob    Fix app bug       app.py (+1 -1), test_app.py (+2)
    c3  Alice  update docs       app.py (+1), README.md (+1)
    c4  Bob    Refactor tests    test_app.py (+1)

    `feature` points at c2; `main` is checked out at c4.
    """
    repo = empty_repo
    _commit(
        repo, "c1", "Add app module", "Alice", "alice@example.com", "2024-01-01T10:00:00+00:00",
        {"app.py": "one\ntwo\nthree\n", "README.md": "# demo\n"},
    )
    _commit(
        repo, "c2", "Fix app bug", "Bob", "bob@example.com", "2024-01-02T10:00:00+00:00",
        {"app.py": "one\nTWO\nthree\n", "test_app.py": "def test():\n    pass\n"},
    )
    _commit(
        repo, "c3", "update docs", "Alice", "alice@example.com", "2024-01-03T10:00:00+00:00",
        {"app.py": "one\nTWO\nthree\nfour\n", "README.md": "# demo\nusage: run app.py\n"},
    )
    _commit(
        repo, "c4", "Refactor tests", "Bob", "bob@example.com", "2024-01-04T10:00:00+00:00",
        {"test_app.py": "def test():\n    pass\n# end\n"},
    )
    _git(repo.path, "branch", "feature", repo.commits["c2"])
    return repo


@pytest.fixture
def make_commit():
    """Add one more commit to a fixture repository: make_commit(repo, label, message, author, email, date, files)."""
    return _commit
