"""
Data models for the upload queue.

Uses dataclasses for queue items, candidate files and run summaries.
"""
import asyncio
import mimetypes
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Any, Optional, List, Union

PayloadSource = Union[Path, bytes]


class ItemStatus(str, Enum):
    """Lifecycle state of a queue item."""
    PENDING = 'pending'
    UPLOADING = 'uploading'
    SUCCESS = 'success'
    ERROR = 'error'

    @property
    def is_terminal(self) -> bool:
        """Returns True for success and error."""
        return self in (ItemStatus.SUCCESS, ItemStatus.ERROR)


def format_file_size(size: int) -> str:
    """
    Format a byte count as a human readable string.

    Example:
        >>> format_file_size(500)
        '500 B'
        >>> format_file_size(1048576)
        '1.0 MB'
    """
    if size < 1024:
        return f"{size} B"
    if size < 1024 ** 2:
        return f"{size / 1024:.1f} KB"
    if size < 1024 ** 3:
        return f"{size / 1024 ** 2:.1f} MB"
    return f"{size / 1024 ** 3:.1f} GB"


def generate_item_id() -> str:
    """Generate a unique queue item id."""
    return f"file_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


@dataclass(frozen=True)
class CandidateFile:
    """
    A file offered to the queue, before validation.

    Attributes:
        name: File name (extension is taken from its trailing dot-segment)
        size: Size in bytes
        mime_type: Declared MIME type, empty when unknown
        source: Path on disk or in-memory content
    """
    name: str
    size: int
    mime_type: str = ''
    source: Optional[PayloadSource] = None

    @property
    def extension(self) -> str:
        """Lowercase extension with leading dot, empty if the name has no dot."""
        if '.' not in self.name:
            return ''
        return '.' + self.name.rsplit('.', 1)[1].lower()

    @classmethod
    def from_path(cls, path: Union[str, Path], mime_type: Optional[str] = None) -> 'CandidateFile':
        """
        Create a candidate from a file on disk.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If path is not a regular file
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        if not path.is_file():
            raise ValueError(f"Path is not a file: {path}")

        if mime_type is None:
            mime_type = mimetypes.guess_type(path.name)[0] or ''
        return cls(
            name=path.name,
            size=path.stat().st_size,
            mime_type=mime_type,
            source=path
        )

    @classmethod
    def from_bytes(cls, name: str, data: bytes, mime_type: str = '') -> 'CandidateFile':
        """Create a candidate from in-memory content."""
        return cls(name=name, size=len(data), mime_type=mime_type, source=bytes(data))


@dataclass(eq=False)
class QueueItem:
    """
    One file's upload unit and its lifecycle state.

    Attributes:
        id: Unique identifier assigned at enqueue time
        payload: File content source, owned by the item
        name: File name
        size: Size in bytes
        size_display: Human readable size
        mime_type: Declared MIME type
        status: Lifecycle state
        progress: Percent 0-100
        error: Failure message (error state only)
        result: Server response body (success state only)
        cancel_handle: In-flight upload task (uploading state only)
    """
    payload: Optional[PayloadSource]
    name: str
    size: int
    mime_type: str = ''
    id: str = field(default_factory=generate_item_id)
    status: ItemStatus = ItemStatus.PENDING
    progress: int = 0
    error: Optional[str] = None
    result: Optional[Dict[str, Any]] = None
    cancel_handle: Optional[asyncio.Task] = field(default=None, repr=False)

    @property
    def size_display(self) -> str:
        """Returns the human readable size."""
        return format_file_size(self.size)

    @classmethod
    def from_candidate(cls, candidate: CandidateFile) -> 'QueueItem':
        """Create a pending item from a validated candidate."""
        return cls(
            payload=candidate.source,
            name=candidate.name,
            size=candidate.size,
            mime_type=candidate.mime_type
        )

    @property
    def progress_contribution(self) -> int:
        """Share of this item in the overall progress."""
        if self.status.is_terminal:
            return 100
        if self.status is ItemStatus.UPLOADING:
            return self.progress
        return 0

    def mark_uploading(self, task: Optional[asyncio.Task] = None) -> None:
        """Transition pending -> uploading."""
        self.status = ItemStatus.UPLOADING
        self.progress = 0
        self.error = None
        self.cancel_handle = task

    def mark_success(self, result: Dict[str, Any]) -> None:
        """Transition uploading -> success."""
        self.status = ItemStatus.SUCCESS
        self.progress = 100
        self.result = result
        self.error = None
        self.cancel_handle = None

    def mark_error(self, message: str) -> None:
        """Transition uploading -> error."""
        self.status = ItemStatus.ERROR
        self.progress = 100
        self.error = message
        self.cancel_handle = None

    def reset(self) -> None:
        """Return to pending, discarding progress and error (cancel and retry)."""
        self.status = ItemStatus.PENDING
        self.progress = 0
        self.error = None
        self.cancel_handle = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dict for display layers."""
        return {
            'id': self.id,
            'name': self.name,
            'size': self.size,
            'sizeDisplay': self.size_display,
            'status': self.status.value,
            'progress': self.progress,
            'error': self.error,
            'result': self.result,
        }


@dataclass(frozen=True)
class AddFilesResult:
    """Outcome of add_files()."""
    added: int
    rejected: int
    rejected_files: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class StatusCounts:
    """Item counts by status."""
    total: int = 0
    pending: int = 0
    uploading: int = 0
    success: int = 0
    error: int = 0


@dataclass(frozen=True)
class ItemOutcome:
    """Final state of one item processed during a run."""
    name: str
    status: ItemStatus
    error: Optional[str] = None


@dataclass(frozen=True)
class UploadSummary:
    """
    Summary of a completed run.

    Attributes:
        success: Items in success state when the run ended
        failed: Items in error state when the run ended
        total: Queue length when the run ended
        results: Outcomes of items settled during this run, in completion order
    """
    success: int
    failed: int
    total: int
    results: List[ItemOutcome] = field(default_factory=list)
