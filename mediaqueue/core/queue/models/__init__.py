"""Queue models."""
from .queue_models import (
    ItemStatus,
    CandidateFile,
    QueueItem,
    AddFilesResult,
    StatusCounts,
    ItemOutcome,
    UploadSummary,
    format_file_size,
    generate_item_id
)

__all__ = [
    'ItemStatus',
    'CandidateFile',
    'QueueItem',
    'AddFilesResult',
    'StatusCounts',
    'ItemOutcome',
    'UploadSummary',
    'format_file_size',
    'generate_item_id'
]
