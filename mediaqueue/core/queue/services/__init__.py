"""Upload queue services module."""
from .validator import FileValidator
from .store import QueueStore
from .transport import HttpTransport, classify_response, limit_exceeded_message
from .progress import overall_progress, percent

__all__ = [
    'FileValidator',
    'QueueStore',
    'HttpTransport',
    'classify_response',
    'limit_exceeded_message',
    'overall_progress',
    'percent',
]
