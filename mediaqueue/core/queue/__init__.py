"""
Concurrent upload queue.

Validates a batch of media files and uploads them to one endpoint with a
bounded number of simultaneous uploads, per-item progress, retry of failed
items and cooperative cancellation.
"""
from .facade import UploadQueue
from .scheduler import (
    UploadScheduler,
    EVENT_PROGRESS,
    EVENT_FILE_COMPLETE,
    EVENT_ALL_COMPLETE,
    EVENT_QUEUE_UPDATE
)
from .config import (
    QueueConfig,
    TransportConfig,
    SSLConfig,
    ProxyConfig,
    clamp_concurrency
)
from .models import (
    ItemStatus,
    CandidateFile,
    QueueItem,
    AddFilesResult,
    StatusCounts,
    ItemOutcome,
    UploadSummary,
    format_file_size
)
from .protocols import TransportProtocol, FileValidatorProtocol
from .services import FileValidator, QueueStore, HttpTransport, overall_progress

__all__ = [
    # Main classes
    'UploadQueue',
    'UploadScheduler',
    'HttpTransport',
    'FileValidator',
    'QueueStore',
    
    # Configuration
    'QueueConfig',
    'TransportConfig',
    'SSLConfig',
    'ProxyConfig',
    'clamp_concurrency',
    
    # Models
    'ItemStatus',
    'CandidateFile',
    'QueueItem',
    'AddFilesResult',
    'StatusCounts',
    'ItemOutcome',
    'UploadSummary',
    'format_file_size',
    'overall_progress',
    
    # Events
    'EVENT_PROGRESS',
    'EVENT_FILE_COMPLETE',
    'EVENT_ALL_COMPLETE',
    'EVENT_QUEUE_UPDATE',
    
    # Protocols
    'TransportProtocol',
    'FileValidatorProtocol',
]
