from __future__ import annotations

import queue
from typing import Any, Callable, Optional


class EventBus:
    """
    Thread-safe handoff from adapter worker threads -> the orchestrator thread.
    Workers push completion events; the single consumer polls (non-blocking).
    Nothing is ever dropped: a lost completion would stall the turn.
    """
    def __init__(self) -> None:
        self.q: "queue.Queue[Any]" = queue.Queue()

    def push(self, event: Any) -> None:
        self.q.put_nowait(event)

    def pop(self) -> Optional[Any]:
        try:
            return self.q.get_nowait()
        except queue.Empty:
            return None

    def drain(self, handler: Callable[[Any], None], max_items: int | None = None) -> int:
        drained = 0
        while max_items is None or drained < max_items:
            event = self.pop()
            if event is None:
                break
            handler(event)
            drained += 1
        return drained

    def __len__(self) -> int:
        return self.q.qsize()
