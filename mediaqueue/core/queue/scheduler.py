"""
Upload scheduler.

Drives pending queue items to success or error with at most N uploads in
flight. All item and counter mutation happens synchronously on the event
loop between awaits, so a claim (select pending item, mark uploading,
start task) can never interleave with another claim, a completion, or a
cancellation.
"""
import asyncio
from typing import Dict, List, Optional, Set, Any

from ..events import EventEmitter
from ..exceptions import (
    UploadError,
    UploadErrorKind,
    UploadInProgressError,
    NothingToUploadError
)
from ..logging import get_logger
from .models import QueueItem, ItemStatus, ItemOutcome, UploadSummary
from .protocols import TransportProtocol
from .services import QueueStore, overall_progress, percent

logger = get_logger('mediaqueue.queue.scheduler')

EVENT_PROGRESS = 'progress'
EVENT_FILE_COMPLETE = 'file_complete'
EVENT_ALL_COMPLETE = 'all_complete'
EVENT_QUEUE_UPDATE = 'queue_update'


class _RunState:
    """Bookkeeping owned by one start_upload() invocation."""

    def __init__(self):
        self.cancelled = False
        self.wake = asyncio.Event()
        self.tasks: Set[asyncio.Task] = set()
        self.results: List[ItemOutcome] = []
        # Items cancelled individually are left for the next run
        self.skip: Set[str] = set()


class UploadScheduler:
    """
    Bounded worker pool over a QueueStore.

    The dispatcher sleeps on the run's wake event, which is set whenever a
    slot frees up, work is added, or the run is cancelled.
    """

    def __init__(
        self,
        store: QueueStore,
        transport: TransportProtocol,
        events: EventEmitter,
        concurrency: int
    ):
        """
        Initialize scheduler.

        Args:
            store: Queue store holding the items
            transport: Single-file upload transport
            events: Emitter receiving progress and lifecycle events
            concurrency: Maximum simultaneous uploads (already clamped)
        """
        self._store = store
        self._transport = transport
        self._events = events
        self._limit = concurrency
        self._run: Optional[_RunState] = None
        self._in_flight: Dict[str, asyncio.Task] = {}
        self._current_id: Optional[str] = None

    @property
    def concurrency(self) -> int:
        """Returns the concurrency limit."""
        return self._limit

    @property
    def is_running(self) -> bool:
        """Returns True while a run is active."""
        return self._run is not None

    @property
    def active_count(self) -> int:
        """Returns the number of uploads in flight."""
        return len(self._in_flight)

    @property
    def current_id(self) -> Optional[str]:
        """Id of the most recently claimed item still uploading."""
        return self._current_id

    async def run(self) -> Optional[UploadSummary]:
        """
        Upload every pending item.

        Returns:
            Run summary, or None if the run was cancelled

        Raises:
            UploadInProgressError: If a run is already active
            NothingToUploadError: If no item is pending
        """
        if self._run is not None:
            logger.warning("Upload already in progress")
            raise UploadInProgressError("Upload already in progress")
        if self._store.next_pending() is None:
            logger.warning("No pending files to upload")
            raise NothingToUploadError("No pending files to upload")

        run = _RunState()
        self._run = run
        pending = self._store.count(ItemStatus.PENDING)
        logger.info(f"Starting upload run: {pending} pending, max {self._limit} concurrent")

        try:
            while not run.cancelled:
                self._dispatch(run)
                if not self._in_flight and self._store.next_pending(run.skip) is None:
                    break
                run.wake.clear()
                await run.wake.wait()

            # Let aborted or finishing tasks unwind before reporting
            if run.tasks:
                await asyncio.gather(*run.tasks, return_exceptions=True)
        except asyncio.CancelledError:
            if self._run is run:
                self.cancel_all()
            raise
        finally:
            if self._run is run:
                self._run = None
                self._current_id = None

        if run.cancelled:
            logger.info(f"Upload run cancelled after {len(run.results)} settled item(s)")
            return None

        summary = UploadSummary(
            success=self._store.count(ItemStatus.SUCCESS),
            failed=self._store.count(ItemStatus.ERROR),
            total=len(self._store),
            results=list(run.results)
        )
        logger.info(
            f"Upload run complete: {summary.success} succeeded, "
            f"{summary.failed} failed, {summary.total} total"
        )
        self._events.emit(EVENT_ALL_COMPLETE, summary)
        return summary

    def notify_work(self) -> None:
        """Wake the dispatcher after items were added or reset to pending."""
        if self._run is not None:
            self._run.wake.set()

    def _dispatch(self, run: _RunState) -> None:
        """Claim pending items until the limit is reached or none remain."""
        while len(self._in_flight) < self._limit and not run.cancelled:
            item = self._store.next_pending(run.skip)
            if item is None:
                return
            self._claim(run, item)

    def _claim(self, run: _RunState, item: QueueItem) -> None:
        task = asyncio.create_task(self._upload_item(run, item))
        item.mark_uploading(task)
        self._in_flight[item.id] = task
        self._current_id = item.id
        run.tasks.add(task)
        logger.debug(f"Claimed {item.name} ({len(self._in_flight)}/{self._limit} active)")
        self._emit_queue_update()

    async def _upload_item(self, run: _RunState, item: QueueItem) -> None:
        """Worker task: upload one item and record its outcome."""
        task = asyncio.current_task()
        try:
            result = await self._transport.upload(
                item, lambda sent, total: self._on_bytes(item, task, sent, total)
            )
        except asyncio.CancelledError:
            # The canceller already rolled the item back
            logger.debug(f"Upload of {item.name} cancelled")
            raise
        except UploadError as e:
            logger.warning(f"Upload of {item.name} failed: {e}")
            self._settle(run, item, task, False, e)
        except Exception as e:
            logger.exception(f"Unexpected error uploading {item.name}")
            error = UploadError(str(e) or 'Upload failed', UploadErrorKind.INTERNAL)
            error.__cause__ = e
            self._settle(run, item, task, False, error)
        else:
            logger.info(f"Uploaded {item.name} ({item.size_display})")
            self._settle(run, item, task, True, result)

    def _owns(self, item: QueueItem, task: Optional[asyncio.Task]) -> bool:
        return task is not None and self._in_flight.get(item.id) is task

    def _on_bytes(self, item: QueueItem, task: Optional[asyncio.Task], sent: int, total: int) -> None:
        if not self._owns(item, task):
            return
        value = percent(sent, total)
        if value == item.progress:
            return
        item.progress = value
        self._events.emit(EVENT_PROGRESS, item, value, overall_progress(self._store))
        self._emit_queue_update()

    def _settle(
        self,
        run: _RunState,
        item: QueueItem,
        task: Optional[asyncio.Task],
        succeeded: bool,
        payload: Any
    ) -> None:
        if not self._owns(item, task):
            return
        del self._in_flight[item.id]
        if self._current_id == item.id:
            self._current_id = None

        if succeeded:
            item.mark_success(payload)
        else:
            item.mark_error(str(payload))
        run.results.append(ItemOutcome(item.name, item.status, item.error))

        self._events.emit(EVENT_FILE_COMPLETE, item, succeeded, payload)
        self._emit_queue_update()
        run.wake.set()

    def _abort(self, item_id: str) -> Optional[asyncio.Task]:
        """Cancel one in-flight task and free its slot."""
        task = self._in_flight.pop(item_id, None)
        if task is None:
            return None
        task.cancel()
        if self._current_id == item_id:
            self._current_id = None
        if self._run is not None:
            self._run.wake.set()
        return task

    def release(self, item: QueueItem) -> None:
        """Abort an item's upload before it is removed from the queue."""
        if self._abort(item.id) is not None:
            logger.debug(f"Aborted upload of removed item {item.name}")
        item.cancel_handle = None

    def cancel(self, item_id: str) -> bool:
        """
        Abort one uploading item and return it to pending.

        The active run does not claim it again; the next run will.

        Returns:
            True if an upload was aborted
        """
        if self._abort(item_id) is None:
            return False
        item = self._store.find(item_id)
        if item is not None:
            item.reset()
        if self._run is not None:
            self._run.skip.add(item_id)
        logger.info(f"Cancelled upload of {item.name if item else item_id}")
        self._emit_queue_update()
        return True

    def cancel_current(self) -> bool:
        """Cancel the most recently claimed item that is still uploading."""
        if self._current_id is None:
            return False
        return self.cancel(self._current_id)

    def cancel_all(self) -> bool:
        """
        Stop the active run and roll every uploading item back to pending.

        Returns:
            True if there was anything to cancel
        """
        if self._run is None and not self._in_flight:
            return False

        aborted = self._abort_all()
        for item_id in aborted:
            item = self._store.find(item_id)
            if item is not None:
                item.reset()
        logger.info(f"Cancelled all uploads ({len(aborted)} in flight)")
        self._emit_queue_update()
        return True

    def reset(self) -> None:
        """Abort everything and drop run bookkeeping (used when clearing)."""
        self._abort_all()

    def _abort_all(self) -> List[str]:
        run, self._run = self._run, None
        if run is not None:
            run.cancelled = True
            run.wake.set()
        aborted = list(self._in_flight)
        for task in self._in_flight.values():
            task.cancel()
        self._in_flight.clear()
        self._current_id = None
        return aborted

    def _emit_queue_update(self) -> None:
        self._events.emit(EVENT_QUEUE_UPDATE, self._store.snapshot())
