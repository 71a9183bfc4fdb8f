"""Clipboard output via pyperclip."""

from __future__ import annotations

from typing import Protocol

import pyperclip

from listfiles import LfError


class ClipboardError(LfError):
    """The system clipboard is unavailable or rejected the text."""


class ClipboardSink(Protocol):
    def set_text(self, text: str) -> None: ...


class SystemClipboard:
    """Write text to the system clipboard."""

    def set_text(self, text: str) -> None:
        """Copy *text* to the clipboard.

        Raises:
            ClipboardError: If no clipboard mechanism is available.
        """
        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as exc:
            raise ClipboardError(f"cannot access clipboard: {exc}") from exc
