"""
Signal bus tests - cross-view notifications.
"""

import pytest
from unittest.mock import MagicMock

from profilebook.core.signals import CONNECTIONS_UPDATED, SignalBus


@pytest.fixture
def signals():
    return SignalBus()


class TestSignalBus:
    """Test listener registration and emission."""

    def test_emit_calls_listeners_in_order(self, signals):
        calls = []
        signals.register(CONNECTIONS_UPDATED, lambda event, **kw: calls.append(("first", kw)))
        signals.register(CONNECTIONS_UPDATED, lambda event, **kw: calls.append(("second", kw)))

        notified = signals.emit(CONNECTIONS_UPDATED, size=3)

        assert notified == 2
        assert calls == [("first", {"size": 3}), ("second", {"size": 3})]

    def test_emit_without_listeners(self, signals):
        assert signals.emit("nothing-here") == 0

    def test_register_non_callable(self, signals):
        with pytest.raises(ValueError, match="Listener must be callable"):
            signals.register(CONNECTIONS_UPDATED, "not_callable")

    def test_unregister(self, signals):
        listener = MagicMock()
        signals.register(CONNECTIONS_UPDATED, listener)
        signals.unregister(CONNECTIONS_UPDATED, listener)
        signals.unregister(CONNECTIONS_UPDATED, listener)

        signals.emit(CONNECTIONS_UPDATED)
        listener.assert_not_called()

    def test_failing_listener_does_not_stop_others(self, signals):
        failing = MagicMock(side_effect=RuntimeError("view gone"))
        healthy = MagicMock()
        signals.register(CONNECTIONS_UPDATED, failing)
        signals.register(CONNECTIONS_UPDATED, healthy)

        assert signals.emit(CONNECTIONS_UPDATED, size=1) == 1
        healthy.assert_called_once_with(CONNECTIONS_UPDATED, size=1)

    def test_clear(self, signals):
        signals.register(CONNECTIONS_UPDATED, MagicMock())
        signals.clear()
        assert signals.listeners(CONNECTIONS_UPDATED) == []
