"""
Custom exceptions for upload queue operations.

Transport failures are captured per item and never abort a run; the
remaining exceptions report misuse of the queue API.
"""
from enum import Enum
from typing import Optional


class QueueError(Exception):
    """Base exception for all upload queue errors."""
    
    def __init__(self, message: str, error_code: Optional[int] = None) -> None:
        """
        Initialize the exception.
        
        Args:
            message: Error message
            error_code: Numeric error code (if available)
        """
        self.error_code = error_code
        super().__init__(message)


class UploadErrorKind(str, Enum):
    """Classification of a failed upload attempt."""
    NETWORK = 'network'
    UNAUTHORIZED = 'unauthorized'
    LIMIT_EXCEEDED = 'limit_exceeded'
    TIMEOUT = 'timeout'
    REJECTED = 'rejected'
    MALFORMED = 'malformed'
    HTTP = 'http'
    READ = 'read'
    INTERNAL = 'internal'


class UploadError(QueueError):
    """Exception raised when a single file upload fails."""
    
    def __init__(
        self,
        message: str,
        kind: UploadErrorKind,
        status: Optional[int] = None
    ) -> None:
        """
        Initialize the exception.
        
        Args:
            message: User-facing error message
            kind: Failure classification
            status: HTTP status of the response (None before any response)
        """
        self.kind = kind
        self.status = status
        super().__init__(message, status)


class UploadInProgressError(QueueError):
    """Raised when start_upload() is called while a run is active."""
    pass


class NothingToUploadError(QueueError):
    """Raised when start_upload() finds no pending items."""
    pass
