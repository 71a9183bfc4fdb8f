"""listfiles — aggregate files selected by glob patterns into one text stream."""

__version__ = "0.1.0"


class LfError(Exception):
    """User-facing CLI error.

    Raised for invalid patterns, missing directories, unreadable files,
    and other input or I/O errors. The message is printed to stderr
    and the process exits with code 1.
    """
