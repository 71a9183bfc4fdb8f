"""Selection engine: raw patterns in, ordered file list out."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from listfiles.filter import PatternFilter
from listfiles.gitignore import IgnoreRules, load_base_rules
from listfiles.patterns import compile_patterns
from listfiles.scanner import EntryAccessError, ScanOptions, scan_files

logger = logging.getLogger(__name__)


def default_workers() -> int:
    return min(32, (os.cpu_count() or 1) + 4)


@dataclass(frozen=True, slots=True)
class SelectOptions:
    """Options controlling file selection.

    Attributes:
        respect_gitignore: Whether ``.gitignore``, ``.git/info/exclude``
            and the global ignore file remove paths from the selection.
        workers: Number of directory-scanning threads.
    """

    respect_gitignore: bool = True
    workers: int = field(default_factory=default_workers)


def select(
    root: Path,
    patterns: Sequence[str],
    options: SelectOptions | None = None,
    on_error: Callable[[EntryAccessError], None] | None = None,
) -> list[str]:
    """Resolve raw include/exclude tokens into an ordered list of files.

    All patterns are compiled before the tree is touched, so a malformed
    pattern aborts without any traversal. Unreadable entries found while
    walking are skipped and reported through ``on_error``.

    Args:
        root: Invocation root. Patterns and results are relative to it.
        patterns: Tokens as given on the command line; a leading ``~``
            marks an exclude.
        options: Selection options. Defaults to ``SelectOptions()``.
        on_error: Optional callback for per-entry access failures.

    Returns:
        list[str]: Root-relative forward-slash paths, each once, in
        lexical walk order. Empty when nothing matches.

    Raises:
        PatternCompileError: If any pattern is malformed.
    """
    select_options = options or SelectOptions()
    root = Path(root)
    matchers = compile_patterns(patterns, root)
    pattern_filter = PatternFilter(matchers)

    if not pattern_filter.has_includes:
        logger.debug("No include patterns given; nothing to select")
        return []

    base_rules = load_base_rules(root) if select_options.respect_gitignore else IgnoreRules()
    paths = scan_files(
        root,
        ScanOptions(
            workers=select_options.workers,
            gitignore=select_options.respect_gitignore,
        ),
        pattern_filter,
        on_error=on_error,
        base_rules=base_rules,
    )
    selected = list(dict.fromkeys(paths))
    logger.debug("Selected %d file(s) under %s", len(selected), root)
    return selected
