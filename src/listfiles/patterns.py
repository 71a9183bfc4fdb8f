"""Pattern classification, directory expansion and glob compilation.

Raw command-line tokens become tagged ``Pattern`` values, bare directory
references are expanded to recursive globs, and every pattern is compiled
into a regex over root-relative, forward-slash path strings.
"""

from __future__ import annotations

import enum
import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Final

from listfiles import LfError

logger = logging.getLogger(__name__)

EXCLUDE_MARKER: Final[str] = "~"

# Characters that make a token a glob rather than a literal path.
_GLOB_CHARS: Final[frozenset[str]] = frozenset("*?[]")

# Matches zero or more whole path segments, each followed by a slash.
_GLOBSTAR_PREFIX: Final[str] = "(?:[^/]*/)*"


class PatternCompileError(LfError):
    """A pattern's glob text is syntactically invalid.

    Attributes:
        pattern: The offending token exactly as the user supplied it.
    """

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"invalid pattern '{pattern}': {reason}")
        self.pattern = pattern
        self.reason = reason


class Polarity(enum.Enum):
    """Whether a pattern adds paths to or removes paths from the selection."""

    INCLUDE = "include"
    EXCLUDE = "exclude"


@dataclass(frozen=True, slots=True)
class Pattern:
    """A single classified selector.

    Attributes:
        text: Normalized glob text with the exclude marker stripped.
            The empty string denotes the invocation root.
        polarity: Include or exclude.
        origin_is_bare_directory: Whether the token named a directory
            and should be expanded to cover its whole subtree.
        mentions_hidden: Whether some segment of ``text`` starts with
            ``.``, opting the pattern into hidden paths.
        raw: The token as given on the command line.
    """

    text: str
    polarity: Polarity
    origin_is_bare_directory: bool
    mentions_hidden: bool
    raw: str

    @property
    def is_exclude(self) -> bool:
        return self.polarity is Polarity.EXCLUDE


@dataclass(frozen=True, slots=True)
class CompiledMatcher:
    """A compiled glob together with the pattern it was built from."""

    pattern: Pattern
    regex: re.Pattern[str]

    def matches(self, path: str) -> bool:
        """Return whether a root-relative, forward-slash path matches."""
        return self.regex.fullmatch(path) is not None


def has_glob_chars(text: str) -> bool:
    return any(c in _GLOB_CHARS for c in text)


def mentions_hidden(text: str) -> bool:
    """Return whether any segment of *text* names a hidden entry.

    The ``.`` and ``..`` navigation segments do not count.
    """
    return any(
        seg.startswith(".") and seg not in (".", "..") for seg in text.split("/")
    )


def _normalize(text: str) -> str:
    while text.startswith("./"):
        text = text[2:]
    if text == ".":
        return ""
    return text.rstrip("/") if text.strip("/") else text


def classify(raw: str, root: Path) -> Pattern:
    """Parse one raw token into a ``Pattern``.

    Never raises: a token that cannot be checked against the filesystem
    is treated as an ordinary glob.

    Args:
        raw: Token as given on the command line, optionally prefixed
            with ``~``.
        root: Invocation root used to resolve directory references.

    Returns:
        Pattern: The classified pattern.
    """
    body = raw
    polarity = Polarity.INCLUDE
    if body.startswith(EXCLUDE_MARKER):
        body = body[len(EXCLUDE_MARKER) :]
        polarity = Polarity.EXCLUDE

    text = _normalize(body)
    if not body:
        bare_dir = False
    elif not text:
        # "." and "./" name the root itself
        bare_dir = True
    elif has_glob_chars(text):
        bare_dir = False
    elif body.endswith("/"):
        bare_dir = True
    else:
        try:
            bare_dir = (root / text).is_dir()
        except OSError:
            logger.debug("Cannot stat pattern target: %s", text)
            bare_dir = False

    return Pattern(
        text=text,
        polarity=polarity,
        origin_is_bare_directory=bare_dir,
        mentions_hidden=mentions_hidden(text),
        raw=raw,
    )


def expand_directory(pattern: Pattern) -> Pattern:
    """Rewrite a bare directory pattern into a recursive subtree glob.

    ``src`` becomes ``src/**`` and the root becomes ``**``. Other
    patterns are returned unchanged.
    """
    if not pattern.origin_is_bare_directory:
        return pattern
    text = f"{pattern.text}/**" if pattern.text else "**"
    return replace(pattern, text=text, mentions_hidden=mentions_hidden(text))


def _translate_class(text: str, start: int, raw: str) -> tuple[str, int]:
    """Translate a ``[...]`` class starting at ``text[start] == "["``.

    Returns:
        tuple[str, int]: The regex fragment and the index just past ``]``.

    Raises:
        PatternCompileError: If the class is never closed.
    """
    i = start + 1
    negate = False
    if i < len(text) and text[i] in "!^":
        negate = True
        i += 1

    parts: list[str] = []
    first = True
    while True:
        if i >= len(text):
            raise PatternCompileError(raw, "unterminated character class")
        c = text[i]
        if c == "]" and not first:
            i += 1
            break
        if c == "\\":
            if i + 1 >= len(text):
                raise PatternCompileError(raw, "unterminated character class")
            parts.append(re.escape(text[i + 1]))
            i += 2
        elif c == "-":
            parts.append("-")
            i += 1
        else:
            parts.append(re.escape(c) if c in "\\^[]&~|" else c)
            i += 1
        first = False

    body = "".join(parts)
    # A class never matches the segment separator.
    if negate:
        return f"[^/{body}]", i
    return f"(?!/)[{body}]", i


def _translate_segment(seg: str, raw: str) -> str:
    out: list[str] = []
    i = 0
    while i < len(seg):
        c = seg[i]
        if c == "*":
            while i < len(seg) and seg[i] == "*":
                i += 1
            out.append("[^/]*")
            continue
        if c == "?":
            out.append("[^/]")
        elif c == "[":
            fragment, i = _translate_class(seg, i, raw)
            out.append(fragment)
            continue
        elif c == "\\":
            if i + 1 >= len(seg):
                raise PatternCompileError(raw, "dangling escape character")
            out.append(re.escape(seg[i + 1]))
            i += 1
        else:
            out.append(re.escape(c))
        i += 1
    return "".join(out)


def _class_spans_separator(text: str) -> bool:
    """Return whether a terminated ``[...]`` class in *text* contains ``/``."""
    i = 0
    while i < len(text):
        c = text[i]
        if c == "\\":
            i += 2
            continue
        if c != "[":
            i += 1
            continue
        j = i + 1
        if j < len(text) and text[j] in "!^":
            j += 1
        first = True
        saw_slash = False
        while j < len(text):
            d = text[j]
            if d == "]" and not first:
                break
            if d == "\\":
                saw_slash = saw_slash or text[j + 1 : j + 2] == "/"
                j += 2
            else:
                saw_slash = saw_slash or d == "/"
                j += 1
            first = False
        else:
            # Unterminated; reported when the segment is translated.
            return False
        if saw_slash:
            return True
        i = j + 1
    return False


def glob_to_regex(text: str, raw: str | None = None) -> str:
    """Translate glob *text* into an anchored regular expression.

    ``*`` and ``?`` stay within a segment, ``**`` as a whole segment
    spans zero or more segments, and ``[...]`` is a character class.
    A pattern without ``/`` also matches the final segment of a path.

    Args:
        text: Normalized glob text.
        raw: Original token for error messages. Defaults to ``text``.

    Returns:
        str: Regex source suitable for ``re.fullmatch``.

    Raises:
        PatternCompileError: If the glob is malformed.
    """
    raw = text if raw is None else raw
    if not text:
        raise PatternCompileError(raw, "empty pattern")

    if _class_spans_separator(text):
        raise PatternCompileError(raw, "character class may not contain '/'")

    segments = text.split("/")
    pieces: list[str] = []
    if len(segments) == 1 and segments[0] != "**":
        pieces.append(_GLOBSTAR_PREFIX)

    last = len(segments) - 1
    for index, seg in enumerate(segments):
        if seg == "**":
            pieces.append(".*" if index == last else _GLOBSTAR_PREFIX)
            continue
        pieces.append(_translate_segment(seg, raw))
        if index != last:
            pieces.append("/")
    return "".join(pieces)


def compile_pattern(pattern: Pattern) -> CompiledMatcher:
    """Compile a classified (and expanded) pattern.

    Raises:
        PatternCompileError: If the glob text is malformed.
    """
    source = glob_to_regex(pattern.text, pattern.raw)
    try:
        regex = re.compile(source, re.DOTALL)
    except re.error as exc:
        raise PatternCompileError(pattern.raw, str(exc)) from exc
    logger.debug("Compiled %s pattern %r -> %s", pattern.polarity.value, pattern.raw, source)
    return CompiledMatcher(pattern=pattern, regex=regex)


def compile_patterns(raw_patterns: Sequence[str], root: Path) -> tuple[CompiledMatcher, ...]:
    """Classify, expand and compile every raw token in order.

    Args:
        raw_patterns: Tokens exactly as given on the command line.
        root: Invocation root used for directory shorthand.

    Returns:
        tuple[CompiledMatcher, ...]: One matcher per token.

    Raises:
        PatternCompileError: On the first malformed pattern.
    """
    return tuple(
        compile_pattern(expand_directory(classify(raw, root))) for raw in raw_patterns
    )
