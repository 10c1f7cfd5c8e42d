from __future__ import annotations

import threading

from turntalk.contracts import CaptureFinished, TranscriptUpdated
from turntalk.ui.bridge import EventBus


def test_event_bus_is_fifo_and_empty_pop_is_none() -> None:
    bus = EventBus()
    bus.push(TranscriptUpdated("a"))
    bus.push(CaptureFinished("a"))
    assert len(bus) == 2
    assert bus.pop() == TranscriptUpdated("a")
    assert bus.pop() == CaptureFinished("a")
    assert bus.pop() is None


def test_drain_respects_max_items() -> None:
    bus = EventBus()
    for i in range(3):
        bus.push(TranscriptUpdated(f"line-{i}"))

    seen: list = []
    assert bus.drain(seen.append, max_items=2) == 2
    assert [e.text for e in seen] == ["line-0", "line-1"]
    assert bus.drain(seen.append) == 1
    assert bus.drain(seen.append) == 0


def test_drain_picks_up_events_pushed_by_the_handler() -> None:
    bus = EventBus()
    bus.push(1)
    seen: list = []

    def handler(n: int) -> None:
        seen.append(n)
        if n < 3:
            bus.push(n + 1)

    assert bus.drain(handler) == 3
    assert seen == [1, 2, 3]


def test_event_bus_keeps_every_event_from_many_threads() -> None:
    bus = EventBus()

    def worker(k: int) -> None:
        for i in range(200):
            bus.push((k, i))

    threads = [threading.Thread(target=worker, args=(k,)) for k in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    seen: list = []
    assert bus.drain(seen.append) == 800
    for k in range(4):
        assert [i for kk, i in seen if kk == k] == list(range(200))
