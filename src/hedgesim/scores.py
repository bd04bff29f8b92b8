from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol

from hedgesim.config import BEST_SCORE_KEY

logger = logging.getLogger(__name__)


class BestScoreStore(Protocol):
    """One persisted scalar: read at session start, written when beaten."""

    def load(self) -> float: ...

    def save(self, value: float) -> None: ...


class MemoryScoreStore:
    def __init__(self, initial: float = 0.0):
        self.value = float(initial)

    def load(self) -> float:
        return self.value

    def save(self, value: float) -> None:
        self.value = float(value)


class JsonScoreStore:
    """
    Keeps the best score in a small JSON file: {"quant_high_score": 1234.5}.

    A missing file reads as 0.0. An unreadable file is logged and also reads
    as 0.0, so a corrupt score never blocks a new session. Last write wins.
    """

    def __init__(self, path: str | Path, key: str = BEST_SCORE_KEY):
        self.path = Path(path)
        self.key = key

    def load(self) -> float:
        if not self.path.exists():
            return 0.0
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return float(data[self.key])
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Ignoring unreadable best score file %s: %s", self.path, e)
            return 0.0

    def save(self, value: float) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({self.key: float(value)}), encoding="utf-8")
        logger.info("Best score %.2f written to %s", value, self.path)
