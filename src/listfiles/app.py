"""Aggregate selected files into one text stream and deliver it."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from listfiles import LfError
from listfiles.clipboard import ClipboardError, ClipboardSink
from listfiles.reader import (
    FileContent,
    describe_binary,
    format_entry,
    is_binary_file,
    mask_java_imports,
    read_text,
)
from listfiles.tokenizer import Tokenizer

logger = logging.getLogger(__name__)


class OutputError(LfError):
    """The aggregated output could not be written."""


@dataclass(frozen=True, slots=True)
class Aggregate:
    """Combined output of a run.

    Attributes:
        files: Per-file results in selection order.
        text: Concatenated formatted entries.
        lines: Total text lines across all files.
        tokens: Total token count, or ``None`` without a tokenizer.
    """

    files: list[FileContent]
    text: str
    lines: int
    tokens: int | None


def process_file(
    root: Path,
    rel_path: str,
    tokenizer: Tokenizer | None = None,
    mask_java: bool = False,
) -> FileContent:
    """Read one selected file and count its lines and tokens.

    Args:
        root: Invocation root.
        rel_path: Root-relative forward-slash path.
        tokenizer: Optional token counter.
        mask_java: Whether to collapse import lines in ``.java`` files.

    Returns:
        FileContent: Processed content.

    Raises:
        ReadError: If the file cannot be read.
    """
    path = root / rel_path
    if is_binary_file(path):
        text = describe_binary(path)
        lines = 0
    else:
        text, lines = read_text(path)
        if mask_java and path.suffix.lower() == ".java":
            text = mask_java_imports(text)
    tokens = tokenizer.count_tokens(text) if tokenizer is not None else None
    return FileContent(path=rel_path, text=text, lines=lines, tokens=tokens)


def aggregate(
    root: Path,
    paths: Sequence[str],
    tokenizer: Tokenizer | None = None,
    mask_java: bool = False,
    workers: int = 1,
) -> Aggregate:
    """Process every selected file and join them in selection order.

    Files are processed concurrently when ``workers > 1``; the output
    order always follows ``paths``.

    Raises:
        ReadError: If any file cannot be read.
    """
    if workers > 1 and len(paths) > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            files = list(
                executor.map(
                    lambda rel: process_file(root, rel, tokenizer, mask_java), paths
                )
            )
    else:
        files = [process_file(root, rel, tokenizer, mask_java) for rel in paths]

    text = "".join(format_entry(f.path, f.text) for f in files)
    lines = sum(f.lines for f in files)
    tokens = sum(f.tokens or 0 for f in files) if tokenizer is not None else None
    return Aggregate(files=files, text=text, lines=lines, tokens=tokens)


def deliver(
    text: str,
    stream: TextIO,
    output_path: Path | None = None,
    clipboard: ClipboardSink | None = None,
) -> str:
    """Send aggregated text to a file, the clipboard, or *stream*.

    A file destination wins over the clipboard. When the clipboard fails
    the text is written to *stream* instead.

    Args:
        text: Aggregated output.
        stream: Fallback text stream, usually stdout.
        output_path: Optional output file.
        clipboard: Optional clipboard sink.

    Returns:
        str: ``"file"``, ``"clipboard"`` or ``"stream"``.

    Raises:
        OutputError: If the output file cannot be written.
    """
    if output_path is not None:
        try:
            output_path.write_text(text, encoding="utf-8", newline="")
        except OSError as exc:
            raise OutputError(f"cannot write to '{output_path}': {exc}") from exc
        logger.debug("Wrote %d characters to %s", len(text), output_path)
        return "file"

    if clipboard is not None:
        try:
            clipboard.set_text(text)
        except ClipboardError as exc:
            logger.warning("%s; writing to stdout instead", exc)
        else:
            logger.debug("Copied %d characters to clipboard", len(text))
            return "clipboard"

    stream.write(text)
    return "stream"
