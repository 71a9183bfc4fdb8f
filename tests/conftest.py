"""Shared fixtures for listfiles tests."""

from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolated_home(monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory) -> Path:
    """Point HOME at an empty directory so a global git ignore file never leaks in."""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    monkeypatch.delenv("USERPROFILE", raising=False)
    return home


class WordTokenizer:
    """Deterministic stand-in for a real tokenizer: one token per word."""

    name = "words"

    def count_tokens(self, text: str) -> int:
        return len(text.split())


@pytest.fixture
def word_tokenizer() -> WordTokenizer:
    return WordTokenizer()


@pytest.fixture
def hidden_tree(tmp_path: Path) -> Path:
    """Tree with hidden files and directories.

    Structure::

        root/
        ├── .git/
        │   └── config
        ├── src/
        │   ├── .env
        │   └── main.rs
        └── README.md
    """
    (tmp_path / ".git").mkdir()
    (tmp_path / ".git" / "config").write_text("[core]\n")
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / ".env").write_text("SECRET=1\n")
    (tmp_path / "src" / "main.rs").write_text("fn main() {}\n")
    (tmp_path / "README.md").write_text("readme\n")
    return tmp_path


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """Create a standard test directory tree.

    Structure::

        root/
        ├── docs/
        │   └── guide.md
        ├── src/
        │   ├── api/
        │   │   ├── auth.py
        │   │   └── user.py
        │   ├── models/
        │   │   └── user.py
        │   └── lib.rs
        ├── tests/
        │   └── test_user.py
        ├── README.md
        └── setup.py
    """
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "guide.md").write_text("guide\n")
    (tmp_path / "src" / "api").mkdir(parents=True)
    (tmp_path / "src" / "api" / "auth.py").write_text("auth\n")
    (tmp_path / "src" / "api" / "user.py").write_text("user\n")
    (tmp_path / "src" / "models").mkdir()
    (tmp_path / "src" / "models" / "user.py").write_text("user\n")
    (tmp_path / "src" / "lib.rs").write_text("pub fn lib() {}\n")
    (tmp_path / "tests").mkdir()
    (tmp_path / "tests" / "test_user.py").write_text("test\n")
    (tmp_path / "README.md").write_text("readme\n")
    (tmp_path / "setup.py").write_text("setup\n")
    return tmp_path


@pytest.fixture
def gitignore_tree(tmp_path: Path) -> Path:
    """Tree with .gitignore for gitignore-integration testing.

    Structure::

        root/
        ├── .gitignore          (*.pyc, node_modules/, secret.txt)
        ├── node_modules/
        │   └── pkg/
        │       └── index.js
        ├── src/
        │   ├── .gitignore      (generated.py)
        │   ├── app.py
        │   ├── app.pyc
        │   └── generated.py
        ├── README.md
        └── secret.txt
    """
    (tmp_path / ".gitignore").write_text("*.pyc\nnode_modules/\nsecret.txt\n")
    (tmp_path / "node_modules" / "pkg").mkdir(parents=True)
    (tmp_path / "node_modules" / "pkg" / "index.js").write_text("js\n")
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / ".gitignore").write_text("generated.py\n")
    (tmp_path / "src" / "app.py").write_text("app\n")
    (tmp_path / "src" / "app.pyc").write_bytes(b"\x00")
    (tmp_path / "src" / "generated.py").write_text("gen\n")
    (tmp_path / "README.md").write_text("readme\n")
    (tmp_path / "secret.txt").write_text("shh\n")
    return tmp_path
