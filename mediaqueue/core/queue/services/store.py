"""
Queue store.

Holds the ordered list of queue items; the single source of truth for
item state. Not thread-safe: all access happens on the event loop.
"""
from typing import Iterable, Iterator, List, Optional, Container

from ..models import QueueItem, ItemStatus, StatusCounts


class QueueStore:
    """
    Ordered collection of queue items with unique ids.
    
    Insertion order is display order and the claim order for pending items.
    """
    
    def __init__(self):
        """Initialize an empty store."""
        self._items: List[QueueItem] = []
    
    def __len__(self) -> int:
        return len(self._items)
    
    def __iter__(self) -> Iterator[QueueItem]:
        return iter(self._items)
    
    def append(self, items: Iterable[QueueItem]) -> None:
        """
        Append items to the end of the queue.
        
        Raises:
            ValueError: If an item id is already present
        """
        new_items = list(items)
        seen = {item.id for item in self._items}
        for item in new_items:
            if item.id in seen:
                raise ValueError(f"Duplicate queue item id: {item.id}")
            seen.add(item.id)
        self._items.extend(new_items)
    
    def get(self, index: int) -> Optional[QueueItem]:
        """Returns the item at index, or None when out of range."""
        if index < 0 or index >= len(self._items):
            return None
        return self._items[index]
    
    def index_of(self, item_id: str) -> int:
        """Returns the index of an item id, or -1."""
        for index, item in enumerate(self._items):
            if item.id == item_id:
                return index
        return -1
    
    def find(self, item_id: str) -> Optional[QueueItem]:
        """Returns the item with the given id, or None."""
        index = self.index_of(item_id)
        return self._items[index] if index >= 0 else None
    
    def pop(self, index: int) -> QueueItem:
        """Remove and return the item at index."""
        return self._items.pop(index)
    
    def clear(self) -> List[QueueItem]:
        """Remove all items, returning them."""
        items, self._items = self._items, []
        return items
    
    def snapshot(self) -> List[QueueItem]:
        """Returns a shallow copy of the item list."""
        return list(self._items)
    
    def with_status(self, status: ItemStatus) -> List[QueueItem]:
        """Returns items currently in the given status, in queue order."""
        return [item for item in self._items if item.status is status]
    
    def next_pending(self, skip: Container[str] = ()) -> Optional[QueueItem]:
        """
        Returns the earliest-enqueued pending item.
        
        Args:
            skip: Item ids that must not be returned
        """
        for item in self._items:
            if item.status is ItemStatus.PENDING and item.id not in skip:
                return item
        return None
    
    def count(self, status: ItemStatus) -> int:
        """Returns the number of items in the given status."""
        return sum(1 for item in self._items if item.status is status)
    
    def status_counts(self) -> StatusCounts:
        """Returns item counts by status."""
        return StatusCounts(
            total=len(self._items),
            pending=self.count(ItemStatus.PENDING),
            uploading=self.count(ItemStatus.UPLOADING),
            success=self.count(ItemStatus.SUCCESS),
            error=self.count(ItemStatus.ERROR)
        )
