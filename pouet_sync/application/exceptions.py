"""
Core business exceptions for the pouet synchronization pipeline.

This module defines a hierarchy of custom exceptions to allow for granular
error handling and clear separation of failure domains.
"""

from typing import Optional


class PouetSyncError(Exception):
    """Base exception for all component-specific errors."""
    pass


# --- Configuration Errors ---

class ConfigurationError(PouetSyncError):
    """Raised for errors related to application configuration."""
    pass


# --- Infrastructure Errors ---

class InfrastructureError(PouetSyncError):
    """Base class for errors related to external systems (network, database)."""
    pass


class NetworkError(InfrastructureError):
    """Raised when a remote request fails or returns an unusable body."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DatabaseError(InfrastructureError):
    """
    Raised for driver-level database failures.

    Carries the native SQLite result code (``errno``) and its symbolic
    name (``code``), e.g. ``1`` and ``"SQLITE_ERROR"``.
    """

    def __init__(
        self,
        message: str,
        errno: Optional[int] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message)
        self.errno = errno
        self.code = code


# --- Domain/Business Logic Errors ---

class DomainError(PouetSyncError):
    """Base class for errors related to business logic failures."""
    pass


class DataError(DomainError):
    """Raised when a dump cannot be decoded (empty, corrupt, malformed)."""
    pass
