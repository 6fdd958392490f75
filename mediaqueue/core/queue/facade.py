"""
Upload queue facade.

Provides the public interface of the upload queue.
Follows Facade Pattern - wires validator, store, scheduler and transport.
"""
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union
import logging

import aiohttp

from ..events import EventEmitter
from ..exceptions import UploadInProgressError
from .config import QueueConfig
from .models import (
    AddFilesResult,
    CandidateFile,
    ItemStatus,
    QueueItem,
    StatusCounts,
    UploadSummary
)
from .protocols import FileValidatorProtocol, TransportProtocol
from .scheduler import (
    UploadScheduler,
    EVENT_PROGRESS,
    EVENT_FILE_COMPLETE,
    EVENT_ALL_COMPLETE,
    EVENT_QUEUE_UPDATE
)
from .services import FileValidator, HttpTransport, QueueStore, overall_progress

FileLike = Union[CandidateFile, str, Path]


class UploadQueue:
    """
    Concurrent upload queue for one endpoint.

    Accepts a batch of files, validates them, and uploads the pending ones
    with bounded concurrency, per-item progress, retry of failed items and
    cancellation.

    Example:
        >>> async with UploadQueue(upload_url="https://example.com/api/videos/upload",
        ...                        csrf_token=token,
        ...                        concurrent_uploads=2) as queue:
        ...     queue.on('progress', lambda item, pct, overall: print(item.name, pct))
        ...     added = queue.add_files(["a.mp4", "b.avi", "notes.txt"])
        ...     summary = await queue.start_upload()
        ...     if summary.failed:
        ...         summary = await queue.retry_failed()
    """

    def __init__(
        self,
        config: Optional[QueueConfig] = None,
        *,
        transport: Optional[TransportProtocol] = None,
        validator: Optional[FileValidatorProtocol] = None,
        session: Optional[aiohttp.ClientSession] = None,
        **options
    ):
        """
        Initialize upload queue.

        Args:
            config: Queue configuration; built from options when omitted
            transport: Optional custom transport (defaults to HttpTransport)
            validator: Optional custom validator
            session: Optional shared aiohttp session for the default transport
            **options: QueueConfig fields or their camelCase option names

        Raises:
            ValueError: If the default transport cannot resolve a relative upload URL
        """
        if config is None:
            config = QueueConfig.from_options(options)
        elif options:
            raise TypeError("Pass either a QueueConfig or keyword options, not both")

        self._config = config
        self._logger = logging.getLogger('mediaqueue.queue')
        self._events = EventEmitter()
        self._store = QueueStore()
        self._validator = validator or FileValidator(
            config.allowed_extensions, config.allowed_mime_types
        )
        self._transport = transport or HttpTransport(config, session=session)
        self._scheduler = UploadScheduler(
            self._store, self._transport, self._events, config.concurrent_uploads
        )

        for event, callback in (
            (EVENT_PROGRESS, config.on_progress),
            (EVENT_FILE_COMPLETE, config.on_file_complete),
            (EVENT_ALL_COMPLETE, config.on_all_complete),
            (EVENT_QUEUE_UPDATE, config.on_queue_update),
        ):
            if callback is not None:
                self._events.on(event, callback)

    async def __aenter__(self) -> 'UploadQueue':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Cancel in-flight uploads and release the transport."""
        self._scheduler.cancel_all()
        await self._transport.close()

    def __len__(self) -> int:
        return len(self._store)

    @property
    def config(self) -> QueueConfig:
        """Returns the queue configuration."""
        return self._config

    @property
    def concurrency(self) -> int:
        """Returns the effective concurrency limit."""
        return self._scheduler.concurrency

    @property
    def is_uploading(self) -> bool:
        """Returns True while a run is active."""
        return self._scheduler.is_running

    def on(self, event: str, callback: Callable) -> 'UploadQueue':
        """
        Register a listener.

        Events: 'progress', 'file_complete', 'all_complete', 'queue_update'.
        """
        self._events.on(event, callback)
        return self

    def off(self, event: str, callback: Optional[Callable] = None) -> 'UploadQueue':
        """Remove a listener (all listeners of the event if callback is None)."""
        self._events.off(event, callback)
        return self

    def _emit_queue_update(self) -> None:
        self._events.emit(EVENT_QUEUE_UPDATE, self._store.snapshot())

    @staticmethod
    def _to_candidate(file: FileLike) -> CandidateFile:
        if isinstance(file, CandidateFile):
            return file
        return CandidateFile.from_path(file)

    def filter_files(self, files: Iterable[FileLike]):
        """Partition files into (valid, invalid) candidates without queueing."""
        return self._validator.filter_files([self._to_candidate(f) for f in files])

    def add_files(self, files: Iterable[FileLike]) -> AddFilesResult:
        """
        Validate files and append the accepted ones as pending items.

        Args:
            files: Candidate files, or paths to files on disk

        Returns:
            Counts of added and rejected files plus rejected names

        Raises:
            FileNotFoundError: If a path does not exist (nothing is queued)
        """
        valid, invalid = self.filter_files(files)

        items = [QueueItem.from_candidate(candidate) for candidate in valid]
        self._store.append(items)

        if items:
            self._logger.debug(f"Queued {len(items)} file(s), {len(self._store)} in queue")
        if invalid:
            self._logger.info(
                f"Rejected {len(invalid)} file(s) with unsupported format: "
                f"{', '.join(c.name for c in invalid)}"
            )

        self._scheduler.notify_work()
        self._emit_queue_update()

        return AddFilesResult(
            added=len(items),
            rejected=len(invalid),
            rejected_files=[c.name for c in invalid]
        )

    def remove_file(self, index: int) -> bool:
        """
        Remove the item at index, aborting its upload first if needed.

        Returns:
            False if the index is out of range
        """
        item = self._store.get(index)
        if item is None:
            return False

        if item.status is ItemStatus.UPLOADING:
            self._scheduler.release(item)
        self._store.pop(index)
        self._logger.debug(f"Removed {item.name} from queue")

        self._emit_queue_update()
        return True

    def remove_file_by_id(self, item_id: str) -> bool:
        """Remove the item with the given id; False if unknown."""
        index = self._store.index_of(item_id)
        if index < 0:
            return False
        return self.remove_file(index)

    def get_files(self) -> List[QueueItem]:
        """Returns a snapshot of the queue in display order."""
        return self._store.snapshot()

    def get_file(self, item_id: str) -> Optional[QueueItem]:
        """Returns the item with the given id, or None."""
        return self._store.find(item_id)

    def get_status_counts(self) -> StatusCounts:
        """Returns item counts by status."""
        return self._store.status_counts()

    def get_overall_progress(self) -> int:
        """Returns the mean progress of all items, 0-100."""
        return overall_progress(self._store)

    def get_uploading_count(self) -> int:
        """Returns the number of items currently uploading."""
        return self._store.count(ItemStatus.UPLOADING)

    def has_files(self) -> bool:
        return len(self._store) > 0

    def has_pending_files(self) -> bool:
        return self._store.next_pending() is not None

    def has_failed_files(self) -> bool:
        return self._store.count(ItemStatus.ERROR) > 0

    def clear_queue(self) -> None:
        """Abort every in-flight upload, empty the queue and reset run state."""
        self._scheduler.reset()
        for item in self._store.clear():
            item.cancel_handle = None
        self._logger.debug("Queue cleared")
        self._emit_queue_update()

    async def start_upload(self) -> Optional[UploadSummary]:
        """
        Upload all pending items.

        Returns:
            Run summary, or None if the run was cancelled

        Raises:
            UploadInProgressError: If a run is already active
            NothingToUploadError: If no item is pending
        """
        return await self._scheduler.run()

    async def retry_failed(self) -> Optional[UploadSummary]:
        """
        Reset failed items to pending and start a new run.

        Successful items are left untouched.

        Raises:
            UploadInProgressError: If a run is already active (nothing is reset)
            NothingToUploadError: If nothing is pending after the reset
        """
        if self._scheduler.is_running:
            raise UploadInProgressError("Upload already in progress")

        failed = self._store.with_status(ItemStatus.ERROR)
        for item in failed:
            item.reset()
        if failed:
            self._logger.info(f"Retrying {len(failed)} failed file(s)")
        self._emit_queue_update()

        return await self.start_upload()

    def cancel(self, item_id: str) -> bool:
        """
        Abort one upload and return the item to pending.

        Returns:
            True if the item was uploading
        """
        return self._scheduler.cancel(item_id)

    def cancel_current(self) -> bool:
        """Abort the most recently started upload that is still running."""
        return self._scheduler.cancel_current()

    def cancel_all(self) -> bool:
        """
        Stop the active run and return every uploading item to pending.

        Returns:
            True if there was anything to cancel
        """
        return self._scheduler.cancel_all()
