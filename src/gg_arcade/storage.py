"""High score persistence backed by a small JSON key-value file."""

from __future__ import annotations

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class HighScoreStore:
    """Stores one game's high score under a fixed key.

    Several games can share the file; each one reads and writes only its own
    key. Storage problems never reach the caller: ``load`` falls back to 0 and
    ``save`` logs and gives up.
    """

    def __init__(self, path: Path | str, key: str) -> None:
        self.path = Path(path)
        self.key = key

    def _read_all(self) -> dict:
        text = self.path.read_text(encoding="utf-8")
        data = json.loads(text or "{}")
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object in {self.path}")
        return data

    def load(self) -> int:
        try:
            value = self._read_all().get(self.key, 0)
        except FileNotFoundError:
            return 0
        except (OSError, ValueError) as exc:
            logger.warning("Could not read high scores from %s: %s", self.path, exc)
            return 0
        # bool is an int subclass; reject it along with floats and strings
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            logger.warning("Ignoring malformed high score %r for %s", value, self.key)
            return 0
        return value

    def save(self, score: int) -> None:
        try:
            data = self._read_all()
        except (OSError, ValueError):
            data = {}
        data[self.key] = int(score)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not save high score to %s: %s", self.path, exc)
