"""Overall progress aggregation."""
import math
from typing import Iterable

from ..models import QueueItem


def round_half_up(value: float) -> int:
    """Round .5 upwards, as browsers' Math.round does."""
    return int(math.floor(value + 0.5))


def overall_progress(items: Iterable[QueueItem]) -> int:
    """
    Mean progress of all items, 0-100.
    
    Pending items count 0, uploading items their own progress, and
    success/error items 100. An empty queue is at 0.
    
    Example:
        Two succeeded, one at 40% and one pending gives
        round((100 + 100 + 40 + 0) / 4) == 60.
    """
    contributions = [item.progress_contribution for item in items]
    if not contributions:
        return 0
    return round_half_up(sum(contributions) / len(contributions))


def percent(sent: int, total: int) -> int:
    """Transmitted share as an integer percent clamped to [0, 100]."""
    if total <= 0:
        return 100 if sent > 0 else 0
    return max(0, min(100, round_half_up(sent * 100 / total)))
