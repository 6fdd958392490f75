"""Tests for EventEmitter."""
import logging

from mediaqueue.core.events import EventEmitter


class TestEventEmitter:
    """Test suite for EventEmitter."""

    def test_on_and_emit(self):
        emitter = EventEmitter()
        received = []
        emitter.on('progress', lambda *args: received.append(args))

        emitter.emit('progress', 'item', 50, 25)

        assert received == [('item', 50, 25)]

    def test_on_returns_self(self):
        emitter = EventEmitter()

        assert emitter.on('x', lambda: None) is emitter

    def test_handlers_called_in_registration_order(self):
        emitter = EventEmitter()
        order = []
        emitter.on('x', lambda: order.append(1))
        emitter.on('x', lambda: order.append(2))

        emitter.emit('x')

        assert order == [1, 2]

    def test_emit_without_handlers(self):
        EventEmitter().emit('nothing', 1, 2)

    def test_failing_handler_does_not_stop_others(self, caplog):
        emitter = EventEmitter()
        received = []

        def broken(value):
            raise ValueError("bad handler")

        emitter.on('x', broken)
        emitter.on('x', received.append)

        with caplog.at_level(logging.ERROR, logger='mediaqueue.events'):
            emitter.emit('x', 7)

        assert received == [7]
        assert "Handler for 'x' raised" in caplog.text

    def test_off_single_handler(self):
        emitter = EventEmitter()
        received = []

        def handler(value):
            received.append(value)

        emitter.on('x', handler)
        emitter.on('x', lambda value: received.append(-value))
        emitter.off('x', handler)
        emitter.emit('x', 1)

        assert received == [-1]
        assert emitter.listener_count('x') == 1

    def test_off_all_handlers(self):
        emitter = EventEmitter()
        emitter.on('x', lambda: None)
        emitter.on('x', lambda: None)

        emitter.off('x')

        assert emitter.listener_count('x') == 0

    def test_off_unknown_event(self):
        emitter = EventEmitter()

        assert emitter.off('missing') is emitter

    def test_handler_removing_itself_during_emit(self):
        emitter = EventEmitter()
        calls = []

        def once():
            calls.append(1)
            emitter.off('x', once)

        emitter.on('x', once)
        emitter.on('x', lambda: calls.append(2))
        emitter.emit('x')
        emitter.emit('x')

        assert calls == [1, 2, 2]
