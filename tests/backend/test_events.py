import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../backend"))

from events import EventBus, PipelineEvent


@pytest.mark.unit
class TestEventBus:
    def setup_method(self):
        self.bus = EventBus()
        self.event = PipelineEvent(status="completed", texts=1, confirmed=frozenset({"hello"}))

    def test_publish_reaches_every_subscriber(self):
        first, second = [], []
        self.bus.subscribe(first.append)
        self.bus.subscribe(second.append)

        self.bus.publish(self.event)

        assert first == [self.event]
        assert second == [self.event]

    def test_unsubscribe(self):
        received = []
        unsubscribe = self.bus.subscribe(received.append)
        unsubscribe()
        unsubscribe()

        self.bus.publish(self.event)
        assert received == []

    def test_failing_subscriber_does_not_stop_delivery(self):
        received = []

        def broken(_event):
            raise RuntimeError("subscriber bug")

        self.bus.subscribe(broken)
        self.bus.subscribe(received.append)

        self.bus.publish(self.event)
        assert received == [self.event]

    def test_events_are_immutable(self):
        with pytest.raises(AttributeError):
            self.event.status = "failed"
