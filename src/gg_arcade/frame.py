"""In-process embedded frames: the boundary between the arcade and a game.

A hosted game only ever sees its :class:`FrameWindow`. The host holds a
:class:`WindowProxy`, which can always post messages but can reach into the
frame (its document, its exports) only when the frame is same-origin.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable

from .scheduler import Scheduler, SchedulerScope

logger = logging.getLogger(__name__)

Listener = Callable[[Any], None]


class CrossOriginError(PermissionError):
    """Raised when the host touches a frame it is not allowed to reach."""


@dataclass(slots=True)
class KeyEvent:
    type: str
    key: str
    code: int = 0
    seq: int | None = None
    default_prevented: bool = False
    propagation_stopped: bool = False

    def prevent_default(self) -> None:
        self.default_prevented = True

    def stop_propagation(self) -> None:
        self.propagation_stopped = True


@dataclass(slots=True)
class PointerEvent:
    type: str  # "pointerdown" | "pointerup"
    x: float
    y: float


@dataclass(slots=True)
class MessageEvent:
    data: Any
    origin: str = "*"
    type: str = "message"


class EventTarget:
    """Minimal listener registry with DOM-like semantics."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    def add_event_listener(self, event_type: str, listener: Listener) -> None:
        bucket = self._listeners.setdefault(event_type, [])
        if listener not in bucket:
            bucket.append(listener)

    def remove_event_listener(self, event_type: str, listener: Listener) -> None:
        bucket = self._listeners.get(event_type)
        if bucket and listener in bucket:
            bucket.remove(listener)

    def listener_count(self, event_type: str | None = None) -> int:
        if event_type is None:
            return sum(len(bucket) for bucket in self._listeners.values())
        return len(self._listeners.get(event_type, ()))

    def dispatch_event(self, event: Any) -> bool:
        """Call listeners for ``event.type``; False if one prevented the default."""
        for listener in list(self._listeners.get(event.type, ())):
            listener(event)
            if getattr(event, "propagation_stopped", False):
                break
        return not getattr(event, "default_prevented", False)

    def remove_all_listeners(self) -> None:
        self._listeners.clear()


class FrameWindow(EventTarget):
    """The game's own view of its frame."""

    def __init__(self, canvas: Any, scheduler: SchedulerScope) -> None:
        super().__init__()
        self.canvas = canvas
        self.scheduler = scheduler
        self.document = EventTarget()
        # Where a game publishes "game" and "game_cleanup" for its host.
        self.exports: dict[str, Any] = {}
        self._inbox: deque[MessageEvent] = deque()

    def post_message(self, data: Any, target_origin: str = "*") -> None:
        """Queue a message; listeners see it on the next ``deliver_messages``."""
        self._inbox.append(MessageEvent(data=data, origin=target_origin))

    @property
    def pending_messages(self) -> int:
        return len(self._inbox)

    def deliver_messages(self) -> int:
        delivered = 0
        while self._inbox:
            event = self._inbox.popleft()
            for listener in list(self._listeners.get("message", ())):
                # A failing listener never stops delivery of the rest of the queue.
                try:
                    listener(event)
                except Exception:
                    logger.exception("Message listener failed for %r", event.data)
            delivered += 1
        return delivered

    def close(self) -> None:
        self._inbox.clear()
        self.scheduler.close()
        self.remove_all_listeners()
        self.document.remove_all_listeners()
        self.exports.clear()


class WindowProxy:
    """The host's handle on a frame window."""

    def __init__(self, window: FrameWindow, *, same_origin: bool) -> None:
        self._window = window
        self._same_origin = same_origin

    def _checked(self) -> FrameWindow:
        if not self._same_origin:
            raise CrossOriginError("Blocked a frame from accessing a cross-origin frame")
        return self._window

    def post_message(self, data: Any, target_origin: str = "*") -> None:
        self._window.post_message(data, target_origin)

    @property
    def document(self) -> EventTarget:
        return self._checked().document

    @property
    def game(self) -> Any:
        return self._checked().exports.get("game")

    @property
    def game_cleanup(self) -> Callable[[], None] | None:
        return self._checked().exports.get("game_cleanup")


class GameFrame:
    """Hosting surface for one game: a canvas, a window and its proxy."""

    def __init__(
        self,
        src: str,
        canvas: Any,
        scheduler: Scheduler,
        *,
        same_origin: bool = True,
    ) -> None:
        self.src = src
        self.same_origin = same_origin
        self.window = FrameWindow(canvas=canvas, scheduler=scheduler.scope())
        self.content_window = WindowProxy(self.window, same_origin=same_origin)
        self.closed = False

    @property
    def canvas(self) -> Any:
        return self.window.canvas

    def deliver_native_event(self, event: Any) -> bool:
        """Hand input that physically lands on the frame to its document."""
        if self.closed:
            return False
        return self.window.document.dispatch_event(event)

    def deliver_messages(self) -> int:
        if self.closed:
            return 0
        return self.window.deliver_messages()

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.window.close()
        logger.debug("Closed frame %s", self.src)
