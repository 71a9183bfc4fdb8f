"""CLI entry point for lf — I/O boundary only."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path

from listfiles import LfError, __version__
from listfiles.app import Aggregate, aggregate, deliver
from listfiles.selector import SelectOptions, default_workers, select
from listfiles.tokenizer import Tokenizer, TokenizerError

logger = logging.getLogger(__name__)

_LOG_FORMAT = "lf: %(levelname)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser.

    Returns:
        argparse.ArgumentParser: Configured parser for the ``lf`` command.
    """
    parser = argparse.ArgumentParser(
        prog="lf",
        description=(
            "Aggregate files matching glob patterns into one text stream with "
            "line and token counts. Prefix a pattern with '~' to exclude. "
            "Hidden paths are skipped unless a pattern names a segment "
            "starting with '.'."
        ),
    )
    parser.add_argument(
        "patterns",
        nargs="*",
        help="Glob patterns or directories to include; '~PATTERN' excludes",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Write output to a file instead of the clipboard",
    )
    parser.add_argument(
        "-n",
        "--no-clipboard",
        action="store_true",
        dest="no_clipboard",
        help="Print output to stdout instead of copying it to the clipboard",
    )
    parser.add_argument(
        "--mask-java-imports",
        action="store_true",
        dest="mask_java_imports",
        help="Collapse import lines in .java files into 'import ...'",
    )
    parser.add_argument(
        "--no-gitignore",
        action="store_true",
        dest="no_gitignore",
        help="Do not honor .gitignore, .git/info/exclude or the global ignore file",
    )
    parser.add_argument(
        "--no-tokens",
        action="store_true",
        dest="no_tokens",
        help="Skip token counting",
    )
    parser.add_argument(
        "-j",
        "--jobs",
        type=int,
        default=None,
        help="Number of worker threads (default: CPU count + 4, at most 32)",
    )
    parser.add_argument(
        "-C",
        "--directory",
        default=".",
        help="Directory to select files from (default: current directory)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log progress and skipped entries to stderr",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


@dataclass(frozen=True, slots=True)
class RunOptions:
    """Validated settings for one run, built from parsed arguments.

    Attributes:
        root: Invocation root.
        patterns: Raw include/exclude tokens.
        output: Output file, or ``None``.
        use_clipboard: Whether to copy output to the clipboard. Always
            ``False`` when ``output`` is set.
        mask_java_imports: Whether to collapse imports in ``.java`` files.
        count_tokens: Whether to count tokens.
        selection: Selection options.
    """

    root: Path
    patterns: tuple[str, ...]
    output: Path | None = None
    use_clipboard: bool = True
    mask_java_imports: bool = False
    count_tokens: bool = True
    selection: SelectOptions = field(default_factory=SelectOptions)


@dataclass(frozen=True, slots=True)
class RunResult:
    """Outcome of a run before delivery.

    Attributes:
        paths: Selected root-relative paths.
        aggregate: Processed content, ``None`` when nothing matched.
        tokenizer_name: Encoding used for token counts, if any.
    """

    paths: list[str]
    aggregate: Aggregate | None
    tokenizer_name: str | None = None


def run_lf(argv: list[str] | None = None, tokenizer: Tokenizer | None = None) -> RunResult:
    """Run lf with provided CLI args and return the aggregated result.

    This function does not deliver output and is the primary test target
    for CLI behavior.

    Args:
        argv: Command-line argument list without program name. If ``None``,
            uses process arguments.
        tokenizer: Token counter to use instead of loading the default
            encoding. Ignored with ``--no-tokens``.

    Returns:
        RunResult: Selection and aggregated content.

    Raises:
        LfError: On any user-facing validation or I/O error.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    return _run(build_run_options(args), tokenizer)


def _resolve_root(directory: str) -> Path:
    """Resolve directory and validate it is a directory.

    Raises:
        LfError: If directory does not exist or is not a directory.
    """
    root = Path(directory)
    if not root.is_dir():
        raise LfError(f"'{directory}' is not a directory")
    return root


def _resolve_workers(jobs: int | None) -> int:
    """Translate ``-j`` into a worker count.

    Raises:
        LfError: If jobs is less than 1.
    """
    if jobs is None:
        return default_workers()
    if jobs < 1:
        raise LfError("--jobs must be a positive integer")
    return jobs


def build_run_options(args: argparse.Namespace) -> RunOptions:
    """Validate parsed arguments and turn them into ``RunOptions``.

    Raises:
        LfError: If no pattern is given, the directory is invalid, or
            ``--jobs`` is not positive.
    """
    if not args.patterns:
        raise LfError("at least one pattern must be provided")
    return RunOptions(
        root=_resolve_root(args.directory),
        patterns=tuple(args.patterns),
        output=args.output,
        use_clipboard=args.output is None and not args.no_clipboard,
        mask_java_imports=args.mask_java_imports,
        count_tokens=not args.no_tokens,
        selection=SelectOptions(
            respect_gitignore=not args.no_gitignore,
            workers=_resolve_workers(args.jobs),
        ),
    )


def _load_tokenizer(options: RunOptions, tokenizer: Tokenizer | None) -> Tokenizer | None:
    if not options.count_tokens:
        return None
    if tokenizer is not None:
        return tokenizer

    from listfiles.tokenizer import O200kTokenizer

    try:
        return O200kTokenizer()
    except TokenizerError as exc:
        logger.warning("%s; token counting disabled", exc)
        return None


def _run(options: RunOptions, tokenizer: Tokenizer | None = None) -> RunResult:
    """Run the select/aggregate pipeline.

    Raises:
        LfError: On any user-facing validation or I/O error.
    """
    paths = select(options.root, options.patterns, options.selection)
    if not paths:
        return RunResult(paths=[], aggregate=None)

    active_tokenizer = _load_tokenizer(options, tokenizer)
    result = aggregate(
        options.root,
        paths,
        tokenizer=active_tokenizer,
        mask_java=options.mask_java_imports,
        workers=options.selection.workers,
    )
    return RunResult(
        paths=paths,
        aggregate=result,
        tokenizer_name=active_tokenizer.name if active_tokenizer is not None else None,
    )


def main() -> None:
    """Run the CLI entry point with process arguments.

    Delivers output to ``-o``, the clipboard or stdout, then prints the
    line and token summary. Exits with code 1 on user-facing errors.
    """
    parser = build_parser()
    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format=_LOG_FORMAT,
        stream=sys.stderr,
    )

    try:
        options = build_run_options(args)
        result = _run(options)
        if result.aggregate is None:
            sys.stdout.write("No files found matching the patterns.\n")
            return

        clipboard = None
        if options.use_clipboard:
            from listfiles.clipboard import SystemClipboard

            clipboard = SystemClipboard()
        deliver(result.aggregate.text, sys.stdout, options.output, clipboard)
    except LfError as exc:
        sys.stderr.write(f"lf: {exc}\n")
        sys.exit(1)
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(1)

    sys.stdout.write(f"Lines: {result.aggregate.lines}\n")
    if result.aggregate.tokens is not None:
        sys.stdout.write(f"Tokens ({result.tokenizer_name}): {result.aggregate.tokens}\n")
