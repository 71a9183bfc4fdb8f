"""Token counting for AI-context budgeting, backed by tiktoken."""

from __future__ import annotations

import logging
from typing import Final, Protocol

from listfiles import LfError

logger = logging.getLogger(__name__)

DEFAULT_ENCODING: Final[str] = "o200k_base"


class TokenizerError(LfError):
    """The token encoder could not be loaded."""


class Tokenizer(Protocol):
    """Protocol for token counters.

    Implementations must be safe to call from several threads.
    """

    name: str

    def count_tokens(self, text: str) -> int: ...


class O200kTokenizer:
    """Count tokens with tiktoken's ``o200k_base`` encoding."""

    def __init__(self, encoding: str = DEFAULT_ENCODING) -> None:
        """Load the encoding.

        Args:
            encoding: tiktoken encoding name.

        Raises:
            TokenizerError: If tiktoken cannot provide the encoding (for
                example when its data files cannot be downloaded).
        """
        import tiktoken

        try:
            self._encoding = tiktoken.get_encoding(encoding)
        except Exception as exc:
            raise TokenizerError(f"cannot load tokenizer '{encoding}': {exc}") from exc
        self.name = self._encoding.name
        logger.debug("Loaded tokenizer %s", self.name)

    def count_tokens(self, text: str) -> int:
        return len(self._encoding.encode(text, allowed_special="all"))
