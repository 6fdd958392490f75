"""
Protocol definitions for the upload queue.

Defines the interfaces the scheduler depends on, so transports and
validators can be swapped (e.g. fakes in tests).
"""
from typing import Protocol, Dict, Any, Callable, Iterable, List, Tuple

from .models import CandidateFile, QueueItem

# Called with (bytes_sent, total_bytes)
ByteProgressCallback = Callable[[int, int], None]


class TransportProtocol(Protocol):
    """Protocol for single-file upload transports."""
    
    async def upload(
        self,
        item: QueueItem,
        on_progress: ByteProgressCallback
    ) -> Dict[str, Any]:
        """
        Upload one item.
        
        Args:
            item: Queue item being uploaded
            on_progress: Called as bytes are transmitted
            
        Returns:
            Server response body on success
            
        Raises:
            UploadError: If the upload failed
            asyncio.CancelledError: If the upload was aborted
        """
        ...
    
    async def close(self) -> None:
        """Release transport resources."""
        ...


class FileValidatorProtocol(Protocol):
    """Protocol for candidate file validation."""
    
    def is_valid(self, candidate: CandidateFile) -> bool:
        """Returns True if the candidate may enter the queue."""
        ...
    
    def filter_files(
        self,
        candidates: Iterable[CandidateFile]
    ) -> Tuple[List[CandidateFile], List[CandidateFile]]:
        """Partition candidates into (valid, invalid)."""
        ...
