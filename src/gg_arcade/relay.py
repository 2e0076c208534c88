"""Forward host key presses into an embedded game frame."""

from __future__ import annotations

import itertools
import logging

from .frame import GameFrame, KeyEvent

logger = logging.getLogger(__name__)

CHANNEL_MESSAGE = "message"
CHANNEL_DISPATCH = "dispatch"
CHANNEL_DIRECT = "direct"


class InputRelay:
    """Best-effort delivery of key presses across a frame boundary.

    Every press is tried on three channels: a posted message, a synthetic
    event on the frame document, and a direct call on the game the frame
    exposes. The last two only work for same-origin frames. Each press gets
    one sequence number shared by all channels so the receiver can drop
    copies.
    """

    def __init__(self, frame: GameFrame) -> None:
        self.frame = frame
        self._seq = itertools.count(1)

    def forward(self, key: str, code: int = 0) -> set[str]:
        """Deliver one key press; returns the channels that accepted it."""
        delivered: set[str] = set()
        if self.frame.closed:
            return delivered

        seq = next(self._seq)
        target = self.frame.content_window

        try:
            target.post_message(
                {"type": "keydown", "key": key, "code": code, "seq": seq}, "*"
            )
            delivered.add(CHANNEL_MESSAGE)
        except Exception as exc:
            logger.debug("postMessage failed for %r: %s", key, exc)

        try:
            target.document.dispatch_event(
                KeyEvent(type="keydown", key=key, code=code, seq=seq)
            )
            delivered.add(CHANNEL_DISPATCH)
        except Exception as exc:
            logger.debug("Direct dispatch failed for %r: %s", key, exc)

        try:
            game = target.game
            handler = getattr(game, "handle_key_press", None)
            if handler is not None:
                handler(KeyEvent(type="keydown", key=key, code=code, seq=seq))
                delivered.add(CHANNEL_DIRECT)
        except Exception as exc:
            logger.debug("Direct method call failed for %r: %s", key, exc)

        return delivered
