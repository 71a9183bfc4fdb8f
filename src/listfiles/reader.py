"""File content reading, binary annotation and entry formatting."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from listfiles import LfError

logger = logging.getLogger(__name__)

# Extension -> kind label. Any extension listed here is treated as binary.
_BINARY_KINDS: Final[dict[str, str]] = {
    **dict.fromkeys(["exe", "dll", "so", "dylib", "bin", "jar"], "Binary"),
    **dict.fromkeys(["png", "jpg", "jpeg", "gif", "bmp", "tiff", "tga", "ico", "webp"], "Image"),
    **dict.fromkeys(["mp4", "avi", "mkv", "mov", "wmv", "flv", "webm"], "Video"),
    **dict.fromkeys(["mp3", "wav", "flac", "ogg", "m4a", "aac"], "Audio"),
    **dict.fromkeys(["zip", "rar", "7z", "tar", "gz", "bz2", "xz"], "Archive"),
    **dict.fromkeys(["pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx"], "Document"),
    **dict.fromkeys(
        [
            "a", "lib", "o", "obj", "rlib", "pdb", "sqlite", "db", "class", "pyc",
            "d", "idx", "cache", "lock", "tmp", "temp",
        ],
        "Binary",
    ),
}

_JAVA_IMPORT_PLACEHOLDER: Final[str] = "import ..."


class ReadError(LfError):
    """A selected file could not be read."""


@dataclass(frozen=True, slots=True)
class FileContent:
    """Processed content of one selected file.

    Attributes:
        path: Root-relative forward-slash path.
        text: Text to emit for the file (contents or binary annotation).
        lines: Number of text lines; ``0`` for binary files.
        tokens: Token count of ``text``, or ``None`` when not counted.
    """

    path: str
    text: str
    lines: int
    tokens: int | None = None


def _extension(path: Path) -> str:
    return path.suffix[1:].lower()


def is_binary_file(path: Path) -> bool:
    """Return whether *path* is treated as binary, judged by extension."""
    return _extension(path) in _BINARY_KINDS


def format_size(size: int) -> str:
    """Render a byte count as ``N bytes``, ``N.N KB``, ``MB`` or ``GB``."""
    if size < 1024:
        return f"{size} bytes"
    if size < 1024**2:
        return f"{size / 1024:.1f} KB"
    if size < 1024**3:
        return f"{size / 1024**2:.1f} MB"
    return f"{size / 1024**3:.1f} GB"


def describe_binary(path: Path) -> str:
    """Return a one-line metadata annotation for a binary file.

    The kind label comes from the extension. ``process_file`` only calls
    this for extensions listed as binary; a caller annotating a file
    without an extension gets ``[Binary file - Size: ...]``.

    Raises:
        ReadError: If the file's metadata cannot be read.
    """
    try:
        size = path.stat().st_size
    except OSError as exc:
        raise ReadError(f"cannot read metadata for '{path}': {exc}") from exc
    ext = _extension(path)
    if not ext:
        return f"[Binary file - Size: {format_size(size)}]"
    return f"[{_BINARY_KINDS.get(ext, 'Binary')} file: {format_size(size)}]"


def read_text(path: Path) -> tuple[str, int]:
    """Read a text file, normalizing every line to end with ``\\n``.

    Undecodable bytes are replaced rather than rejected.

    Returns:
        tuple[str, int]: Normalized text and its line count.

    Raises:
        ReadError: If the file cannot be opened or read.
    """
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise ReadError(f"cannot read '{path}': {exc}") from exc
    lines = raw.decode("utf-8", errors="replace").split("\n")
    if lines[-1] == "":
        lines.pop()
    lines = [line.removesuffix("\r") for line in lines]
    return "".join(f"{line}\n" for line in lines), len(lines)


def mask_java_imports(text: str) -> str:
    """Collapse all ``import`` lines into a single ``import ...`` line.

    The placeholder takes the position of the first import. Text without
    imports is returned unchanged.
    """
    out: list[str] = []
    masked = False
    for line in text.splitlines():
        if line.lstrip().startswith("import "):
            if not masked:
                out.append(_JAVA_IMPORT_PLACEHOLDER)
                masked = True
            continue
        out.append(line)
    if not masked:
        return text
    return "".join(f"{line}\n" for line in out)


def format_entry(path: str, text: str) -> str:
    """Render one file as ``<path>\\n<text>\\n\\n``."""
    return f"{path}\n{text}\n\n"
