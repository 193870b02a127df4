"""
Scanner-specific exception classes.

These are the format-negative verdicts raised while sniffing a byte stream.
They are caught by the format sniffer, which falls back to the next
candidate format, and never escape a scan.
"""

from __future__ import annotations

from typing import Any

from core.exceptions import FormatError


class NotAnArchiveError(FormatError):
    """
    Raised when a stream is not counted as a tar archive.

    This covers streams whose first header block cannot be framed, and
    archives whose members contributed no k-mers at all (an empty or
    irrelevant archive cannot be told apart from misparsed bytes).
    """

    def __init__(
        self,
        message: str = "Stream is not a tar archive",
        details: str | None = None,
        context: dict[str, Any] | None = None,
        original_exception: Exception | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="NOT_AN_ARCHIVE",
            details=details,
            context=context,
            original_exception=original_exception,
        )


class NotSequenceFormatError(FormatError):
    """
    Raised when a stream does not follow the FASTA header/body layout.

    This typically indicates:
    - No header line ('>' at the start of a line) anywhere in the stream
    - A '>' appearing in the middle of a sequence line
    """

    def __init__(
        self,
        message: str = "Stream is not in FASTA format",
        details: str | None = None,
        context: dict[str, Any] | None = None,
        original_exception: Exception | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="NOT_SEQUENCE_FORMAT",
            details=details,
            context=context,
            original_exception=original_exception,
        )
