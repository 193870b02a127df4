"""
Core exception classes for kmerscan.

This module defines the base exception hierarchy that the scanner's
exceptions inherit from. They carry enough context to be logged as
structured records.
"""

from __future__ import annotations

from typing import Any


class KmerScanError(Exception):
    """
    Base exception class for all kmerscan errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code for categorization
        details: Additional error details (e.g., original exception message)
        context: Dictionary containing scan context (path, archive member, k, ...)
        original_exception: The original exception that was wrapped, if any
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: str | None = None,
        context: dict[str, Any] | None = None,
        original_exception: Exception | None = None,
    ) -> None:
        """
        Initialize a KmerScanError.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code (defaults to class name in UPPER_SNAKE_CASE)
            details: Additional error details
            context: Scan context dictionary
            original_exception: The original exception that was wrapped
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self._default_error_code()
        self.details = details
        self.context = context or {}
        self.original_exception = original_exception

    def _default_error_code(self) -> str:
        """Generate default error code from class name."""
        # Convert class name like "NotAnArchiveError" to "NOT_AN_ARCHIVE_ERROR"
        import re

        return re.sub(r"(?<!^)(?=[A-Z])", "_", self.__class__.__name__).upper()

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to a dictionary for JSON serialization.

        Returns:
            Dictionary representation of the error
        """
        error_dict: dict[str, Any] = {
            "error_code": self.error_code,
            "message": self.message,
        }

        if self.details:
            error_dict["details"] = self.details

        if self.context:
            error_dict["context"] = self.context

        if self.original_exception:
            error_dict["original_exception"] = {
                "type": type(self.original_exception).__name__,
                "module": type(self.original_exception).__module__,
                "message": str(self.original_exception),
            }

        return error_dict


class ValidationError(KmerScanError):
    """
    Exception raised when caller input is invalid.

    Examples: a k-mer length below one, an empty list of paths.
    """


class FormatError(KmerScanError):
    """
    Exception raised when a byte stream does not conform to the format under test.

    This is a verdict, not a fault: callers try the next candidate format
    and treat the stream as contributing nothing once all candidates fail.
    """
