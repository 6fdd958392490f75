"""
mediaqueue - Async concurrent upload queue for media files.

Usage:
    >>> from mediaqueue import UploadQueue
    >>> 
    >>> async with UploadQueue(upload_url="https://example.com/api/videos/upload") as queue:
    ...     queue.add_files(["intro.mp4", "outro.mov"])
    ...     summary = await queue.start_upload()
    ...     print(summary.success, summary.failed)
"""
import logging

from .core.queue import (
    UploadQueue,
    QueueConfig,
    TransportConfig,
    SSLConfig,
    ProxyConfig,
    ItemStatus,
    CandidateFile,
    QueueItem,
    AddFilesResult,
    StatusCounts,
    ItemOutcome,
    UploadSummary,
    HttpTransport,
    format_file_size
)
from .core.exceptions import (
    QueueError,
    UploadError,
    UploadErrorKind,
    UploadInProgressError,
    NothingToUploadError
)

__version__ = '1.0.0'


def setup_logging(level=logging.INFO):
    """
    Configure logging for mediaqueue modules.
    
    Args:
        level: Logging level (default: logging.INFO)
    """
    loggers = [
        'mediaqueue',
        'mediaqueue.events',
        'mediaqueue.queue',
        'mediaqueue.queue.scheduler',
        'mediaqueue.queue.transport',
        'mediaqueue.queue.validator',
    ]
    
    for logger_name in loggers:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        logger.propagate = True


__all__ = [
    'UploadQueue',
    'QueueConfig',
    'TransportConfig',
    'SSLConfig',
    'ProxyConfig',
    'ItemStatus',
    'CandidateFile',
    'QueueItem',
    'AddFilesResult',
    'StatusCounts',
    'ItemOutcome',
    'UploadSummary',
    'HttpTransport',
    'format_file_size',
    'QueueError',
    'UploadError',
    'UploadErrorKind',
    'UploadInProgressError',
    'NothingToUploadError',
    'setup_logging',
]
