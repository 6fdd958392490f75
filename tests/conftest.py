"""Pytest fixtures for mediaqueue tests."""
import asyncio
from typing import Any, Dict, List

import pytest

from mediaqueue import CandidateFile


def video(name: str, size: int = 1024, mime_type: str = 'video/mp4') -> CandidateFile:
    """Returns an in-memory candidate file."""
    return CandidateFile.from_bytes(name, b'x' * size, mime_type)


async def wait_until(predicate, timeout: float = 2.0) -> None:
    """Yield to the event loop until predicate() is true."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.001)


class FakeTransport:
    """
    In-process transport.

    With hold=True every upload blocks until release(name) is called, which
    lets tests observe the queue while uploads are in flight.
    """

    def __init__(self, hold: bool = False):
        self.hold = hold
        self.outcomes: Dict[str, Any] = {}
        self.progress: Dict[str, List[int]] = {}
        self.calls: List[str] = []
        self.cancelled: List[str] = []
        self.active = 0
        self.max_active = 0
        self.closed = False
        self._gates: Dict[str, asyncio.Event] = {}

    def _gate(self, name: str) -> asyncio.Event:
        if name not in self._gates:
            self._gates[name] = asyncio.Event()
        return self._gates[name]

    def release(self, name: str) -> None:
        self._gate(name).set()

    def release_all(self) -> None:
        for name in self.calls:
            self.release(name)

    async def upload(self, item, on_progress):
        self.calls.append(item.name)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            for sent in self.progress.get(item.name, []):
                on_progress(sent, item.size)
            if self.hold:
                await self._gate(item.name).wait()
                self._gates.pop(item.name, None)
            else:
                await asyncio.sleep(0)
            outcome = self.outcomes.get(item.name, {'success': True, 'name': item.name})
            if isinstance(outcome, BaseException):
                raise outcome
            return outcome
        except asyncio.CancelledError:
            self.cancelled.append(item.name)
            raise
        finally:
            self.active -= 1

    async def close(self):
        self.closed = True


@pytest.fixture
def transport():
    """Transport that completes uploads immediately."""
    return FakeTransport()


@pytest.fixture
def held_transport():
    """Transport whose uploads wait for release()."""
    return FakeTransport(hold=True)


@pytest.fixture(name='video')
def video_factory():
    """Factory for in-memory candidate files."""
    return video


@pytest.fixture(name='wait_until')
def wait_until_fixture():
    """Async helper waiting for a condition on the event loop."""
    return wait_until
