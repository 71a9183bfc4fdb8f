"""Core directory walker using os.scandir over a pool of worker threads."""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from listfiles import LfError
from listfiles.filter import is_hidden_path
from listfiles.gitignore import GITIGNORE_NAME, IgnoreRules, load_gitignore_spec

logger = logging.getLogger(__name__)


class EntryAccessError(LfError):
    """A directory or file could not be read during the walk.

    Never raised out of the walk. Instances are reported to the caller
    and the walk continues.

    Attributes:
        path: Root-relative path of the entry (``.`` for the root).
        reason: Human-readable cause.
    """

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"cannot access '{path}': {reason}")
        self.path = path
        self.reason = reason


@dataclass(frozen=True, slots=True)
class Candidate:
    """A file discovered during the walk.

    Attributes:
        path: Forward-slash path relative to the walk root.
        is_hidden: Whether some segment of ``path`` starts with ``.``.
    """

    path: str
    is_hidden: bool


@dataclass(frozen=True, slots=True)
class ScanOptions:
    """Options controlling walker behavior.

    Attributes:
        workers: Number of directory-scanning threads. ``1`` walks
            inline without a pool.
        gitignore: Whether to honor ``.gitignore`` files found in the tree.
    """

    workers: int = 1
    gitignore: bool = False


class CandidateFilter(Protocol):
    """Protocol for candidate filtering.

    Keeps walker logic decoupled from matching strategy.
    """

    def accepts(self, candidate: Candidate) -> bool: ...


class _AcceptAll:
    """Default pass-through filter that keeps every file."""

    def accepts(self, candidate: Candidate) -> bool:
        return True


def walk_order_key(path: str) -> list[str]:
    """Sort key giving lexical pre-order over path segments."""
    return path.split("/")


class _Accumulator:
    """Thread-safe append-only collection of selected paths and errors."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._paths: list[str] = []
        self._errors: list[EntryAccessError] = []

    def add_paths(self, paths: list[str]) -> None:
        if not paths:
            return
        with self._lock:
            self._paths.extend(paths)

    def add_error(self, error: EntryAccessError) -> None:
        with self._lock:
            self._errors.append(error)

    def paths(self) -> list[str]:
        with self._lock:
            return sorted(self._paths, key=walk_order_key)

    def errors(self) -> list[EntryAccessError]:
        with self._lock:
            return sorted(self._errors, key=lambda e: walk_order_key(e.path))


# A directory task: (root-relative directory, ignore rules of its parent)
_Task = tuple[str, IgnoreRules]


class _Walker:
    def __init__(
        self,
        root: Path,
        options: ScanOptions,
        candidate_filter: CandidateFilter,
        accumulator: _Accumulator,
    ) -> None:
        self._root = root
        self._options = options
        self._filter = candidate_filter
        self._acc = accumulator

    def scan_directory(self, task: _Task) -> list[_Task]:
        """Scan one directory, record matching files, return child tasks."""
        rel_dir, rules = task
        current = self._root / rel_dir if rel_dir else self._root

        try:
            with os.scandir(current) as it:
                raw_entries = sorted(it, key=lambda e: e.name)
        except OSError as exc:
            self._acc.add_error(EntryAccessError(rel_dir or ".", exc.strerror or str(exc)))
            return []

        if self._options.gitignore and any(e.name == GITIGNORE_NAME for e in raw_entries):
            rules = rules.with_spec(rel_dir, load_gitignore_spec(current))

        selected: list[str] = []
        children: list[_Task] = []

        for dir_entry in raw_entries:
            name = dir_entry.name
            rel = f"{rel_dir}/{name}" if rel_dir else name
            try:
                is_dir = dir_entry.is_dir(follow_symlinks=False)
                is_file = not is_dir and dir_entry.is_file()
            except OSError as exc:
                self._acc.add_error(EntryAccessError(rel, exc.strerror or str(exc)))
                continue

            if is_dir:
                if rules.ignores(rel, is_dir=True):
                    logger.debug("Ignored directory: %s", rel)
                    continue
                children.append((rel, rules))
                continue

            if not is_file:
                if dir_entry.is_symlink() and not os.path.exists(dir_entry.path):
                    self._acc.add_error(EntryAccessError(rel, "broken symbolic link"))
                else:
                    logger.debug("Skipping non-regular entry: %s", rel)
                continue

            if rules.ignores(rel):
                logger.debug("Ignored file: %s", rel)
                continue

            candidate = Candidate(path=rel, is_hidden=is_hidden_path(rel))
            if self._filter.accepts(candidate):
                selected.append(rel)

        self._acc.add_paths(selected)
        return children


def scan_files(
    root: Path,
    options: ScanOptions | None = None,
    candidate_filter: CandidateFilter | None = None,
    on_error: Callable[[EntryAccessError], None] | None = None,
    base_rules: IgnoreRules | None = None,
) -> list[str]:
    """Walk *root* and return accepted files in deterministic walk order.

    Directories are descended unconditionally (symlinked directories are
    not followed, ignored directories are pruned) and never returned.
    Unreadable entries are skipped, logged, and passed to ``on_error``.

    Args:
        root: Root directory to walk.
        options: Walker options. Defaults to ``ScanOptions()``.
        candidate_filter: Optional file filter implementation.
        on_error: Optional callback for per-entry access failures,
            invoked on the calling thread after the walk.
        base_rules: Ignore rules already in effect at the root.

    Returns:
        list[str]: Root-relative forward-slash file paths, sorted in
        lexical pre-order.
    """
    scan_options = options or ScanOptions()
    active_filter = candidate_filter or _AcceptAll()
    root = root.resolve()

    if not root.is_dir():
        return []

    accumulator = _Accumulator()
    walker = _Walker(root, scan_options, active_filter, accumulator)
    start: _Task = ("", base_rules or IgnoreRules())

    if scan_options.workers <= 1:
        stack: list[_Task] = [start]
        while stack:
            children = walker.scan_directory(stack.pop())
            # Push children in reverse so first-alphabetical is popped first
            stack.extend(reversed(children))
    else:
        with ThreadPoolExecutor(max_workers=scan_options.workers) as executor:
            pending: set[Future[list[_Task]]] = {executor.submit(walker.scan_directory, start)}
            while pending:
                done, pending = wait(pending, return_when=FIRST_COMPLETED)
                for future in done:
                    for child in future.result():
                        pending.add(executor.submit(walker.scan_directory, child))

    for error in accumulator.errors():
        logger.warning("%s", error)
        if on_error is not None:
            on_error(error)

    return accumulator.paths()
