# cosmic_ball/game/storage.py
from __future__ import annotations
import json
import logging
import os
from pathlib import Path
from typing import Dict, Union
from .config import HIGHSCORE_KEY

logger = logging.getLogger(__name__)


def _as_score(value) -> int:
    try:
        score = int(value)
    except (TypeError, ValueError):
        return 0
    return max(0, score)


class MemoryStore:
    """Key -> integer store kept in memory (tests, headless envs)."""
    def __init__(self, initial: Union[Dict[str, int], None] = None):
        self._values: Dict[str, int] = dict(initial or {})

    def get(self, key: str = HIGHSCORE_KEY) -> int:
        return _as_score(self._values.get(key, 0))

    def set(self, key: str, value: int) -> None:
        self._values[key] = _as_score(value)


class HighScoreStore:
    """
    Key -> integer store backed by a small JSON object on disk.
    Unreadable or corrupt files count as empty; write failures are logged
    and the game carries on.
    """
    def __init__(self, path: Union[str, os.PathLike]):
        self.path = Path(path)
        self._values: Dict[str, int] = self._load()

    def _load(self) -> Dict[str, int]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("could not read high scores from %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("ignoring high score file %s: not a JSON object", self.path)
            return {}
        return {str(k): _as_score(v) for k, v in data.items()}

    def get(self, key: str = HIGHSCORE_KEY) -> int:
        return self._values.get(key, 0)

    def set(self, key: str, value: int) -> None:
        self._values[key] = _as_score(value)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self._values, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("could not save high score to %s: %s", self.path, e)
