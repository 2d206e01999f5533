"""
Custom exceptions for gittar.

This module defines the error kinds surfaced by the fetch entry point. Both
carry a human-readable message and may wrap the underlying cause.
"""

from typing import Optional


class GittarError(Exception):
    """
    Base exception for all gittar errors.

    All custom exceptions in gittar inherit from this class so callers can
    catch every package-specific failure with a single handler.
    """

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: The primary error message.
            details: Optional additional context about the error.
            cause: Optional underlying exception that triggered this error.
        """
        self.message = message
        self.details = details
        self.cause = cause
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


# =============================================================================
# URL / Download Errors
# =============================================================================


class URLError(GittarError):
    """
    Exception raised when an identifier cannot be resolved or downloaded.

    This includes:
    - Identifiers that do not yield an owner and repository
    - Unsupported or unrecognized hosting platforms
    - Non-2xx HTTP responses
    - Transport-level network failures

    Attributes:
        url: The identifier or tarball URL involved.
        branch: The ref being fetched, if any.
        status_code: The HTTP status code, for HTTP failures.
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        branch: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message, details, cause)
        self.url = url
        self.branch = branch
        self.status_code = status_code


# =============================================================================
# File System Errors
# =============================================================================


class FileSystemError(GittarError):
    """
    Exception raised for file system-related errors.

    This includes:
    - Cache existence checks that fail unexpectedly
    - Copy failures while materializing the output directory
    - Archive extraction failures (corrupt or invalid archives)

    Attributes:
        path: The file path that caused the error.
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        details: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message, details, cause)
        self.path = path


class PathValidationError(FileSystemError):
    """Exception raised when a requested subpath escapes its base directory."""

    pass


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(GittarError):
    """Exception raised when the settings file or an override is invalid."""

    pass
