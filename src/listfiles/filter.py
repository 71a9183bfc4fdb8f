"""Candidate filtering: include/exclude matching and hidden-path logic."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from listfiles.patterns import CompiledMatcher, mentions_hidden

if TYPE_CHECKING:
    from listfiles.scanner import Candidate


def is_hidden_path(path: str) -> bool:
    """Return whether any segment of a root-relative path starts with ``.``."""
    return mentions_hidden(path)


def hidden_eligible(candidate: Candidate, includes: Iterable[CompiledMatcher]) -> bool:
    """Decide whether a candidate passes the hidden-path gate.

    Non-hidden candidates always pass. A hidden candidate passes only when
    an include matcher whose pattern mentions a hidden segment matches it.

    Args:
        candidate: Entry discovered during the walk.
        includes: Compiled include matchers.

    Returns:
        bool: ``True`` when the candidate may be selected.
    """
    if not candidate.is_hidden:
        return True
    return any(
        m.pattern.mentions_hidden and m.matches(candidate.path) for m in includes
    )


class PatternFilter:
    """Select file candidates by compiled include and exclude matchers.

    Matchers are read-only after construction, so one instance can be
    shared by every walker thread.
    """

    def __init__(self, matchers: Iterable[CompiledMatcher]) -> None:
        """Initialize pattern filter.

        Args:
            matchers: Compiled matchers of both polarities, in command-line
                order.
        """
        matchers = tuple(matchers)
        self._includes: tuple[CompiledMatcher, ...] = tuple(
            m for m in matchers if not m.pattern.is_exclude
        )
        self._excludes: tuple[CompiledMatcher, ...] = tuple(
            m for m in matchers if m.pattern.is_exclude
        )

    @property
    def has_includes(self) -> bool:
        return bool(self._includes)

    def accepts(self, candidate: Candidate) -> bool:
        """Return whether a file candidate belongs in the selection.

        Args:
            candidate: File discovered during the walk.

        Returns:
            bool: ``True`` when some include matches, the hidden gate is
            passed and no exclude matches.
        """
        path = candidate.path
        matched = [m for m in self._includes if m.matches(path)]
        if not matched:
            return False
        if not hidden_eligible(candidate, matched):
            return False
        return not any(m.matches(path) for m in self._excludes)
