"""Gitignore integration — load ignore rules via pathspec."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from pathspec import GitIgnoreSpec

logger = logging.getLogger(__name__)

GITIGNORE_NAME = ".gitignore"


def _valid_lines(path: Path, lines: list[str]) -> list[str]:
    valid: list[str] = []
    for number, line in enumerate(lines, start=1):
        try:
            GitIgnoreSpec.from_lines([line])
        except ValueError as exc:
            logger.warning("Skipping invalid ignore pattern at %s:%d: %s", path, number, exc)
            continue
        valid.append(line)
    return valid


def _read_spec(path: Path) -> GitIgnoreSpec | None:
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError):
        logger.debug("Cannot read ignore file: %s", path)
        return None
    try:
        return GitIgnoreSpec.from_lines(lines)
    except ValueError:
        # Like git, drop malformed lines and keep the rest of the file.
        return GitIgnoreSpec.from_lines(_valid_lines(path, lines))


def load_gitignore_spec(root: Path) -> GitIgnoreSpec | None:
    """Load .gitignore patterns from *root* directory.

    Args:
        root: Directory containing the ``.gitignore`` file.

    Returns:
        A compiled spec when a ``.gitignore`` exists and is readable,
        otherwise ``None``.
    """
    return _read_spec(root / GITIGNORE_NAME)


def global_ignore_paths() -> list[Path]:
    """Return candidate locations of the user's global ignore file."""
    paths: list[Path] = []
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        paths.append(Path(xdg) / "git" / "ignore")
    home = os.environ.get("HOME") or os.environ.get("USERPROFILE")
    if home:
        if not xdg:
            paths.append(Path(home) / ".config" / "git" / "ignore")
        paths.append(Path(home) / ".gitignore_global")
    return paths


@dataclass(frozen=True, slots=True)
class IgnoreRules:
    """Ignore specs in effect for one directory of the walk.

    Each spec is paired with the root-relative directory it was loaded
    from, and matches paths relative to that directory.

    Attributes:
        specs: ``(base_dir, spec)`` pairs, outermost first. An empty
            ``base_dir`` is the walk root.
        outer: ``(offset, spec)`` pairs for specs loaded above the walk
            root. ``offset`` is the walk root's path relative to the
            directory the spec came from, and is prepended before
            matching.
    """

    specs: tuple[tuple[str, GitIgnoreSpec], ...] = ()
    outer: tuple[tuple[str, GitIgnoreSpec], ...] = ()

    def with_spec(self, base_dir: str, spec: GitIgnoreSpec | None) -> IgnoreRules:
        if spec is None:
            return self
        return IgnoreRules(self.specs + ((base_dir, spec),), self.outer)

    def with_outer_spec(self, offset: str, spec: GitIgnoreSpec | None) -> IgnoreRules:
        if spec is None:
            return self
        return IgnoreRules(self.specs, self.outer + ((offset, spec),))

    def ignores(self, rel_path: str, is_dir: bool = False) -> bool:
        """Return whether any spec ignores a root-relative path.

        Args:
            rel_path: Forward-slash path relative to the walk root.
            is_dir: Whether the path is a directory.

        Returns:
            bool: ``True`` when some spec matches.
        """
        suffix = "/" if is_dir else ""
        for offset, spec in self.outer:
            local = f"{offset}/{rel_path}" if offset else rel_path
            if spec.match_file(local + suffix):
                return True
        for base_dir, spec in self.specs:
            if base_dir:
                prefix = base_dir + "/"
                if not rel_path.startswith(prefix):
                    continue
                local = rel_path[len(prefix) :]
            else:
                local = rel_path
            if spec.match_file(local + suffix):
                return True
        return False


def find_repository_root(start: Path) -> Path | None:
    """Return the nearest directory at or above *start* holding ``.git``."""
    for directory in (start, *start.parents):
        if (directory / ".git").exists():
            return directory
    return None


def _offset(root: Path, directory: Path) -> str:
    rel = root.relative_to(directory).as_posix()
    return "" if rel == "." else rel


def load_base_rules(root: Path) -> IgnoreRules:
    """Load the ignore rules that apply at *root* before the walk starts.

    Covers the user's global ignore file and, when *root* lies inside a
    git repository, ``.git/info/exclude`` and every ``.gitignore`` from
    the repository root down to *root*'s parent. The ``.gitignore`` at
    *root* and below is picked up during the walk.

    Args:
        root: Walk root.

    Returns:
        IgnoreRules: Rules matching paths relative to the walk root.
    """
    root = root.resolve()
    repo = find_repository_root(root)
    repo_offset = _offset(root, repo) if repo is not None else ""

    rules = IgnoreRules()
    sources = list(global_ignore_paths())
    if repo is not None:
        sources.append(repo / ".git" / "info" / "exclude")
    for path in sources:
        if path.is_file():
            logger.debug("Loading ignore rules from %s", path)
            rules = rules.with_outer_spec(repo_offset, _read_spec(path))

    if repo is not None:
        directory = repo
        for part in root.relative_to(repo).parts:
            gitignore = directory / GITIGNORE_NAME
            if gitignore.is_file():
                logger.debug("Loading parent ignore rules from %s", gitignore)
                rules = rules.with_outer_spec(_offset(root, directory), _read_spec(gitignore))
            directory = directory / part
    return rules
