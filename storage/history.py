"""Persisted exam history"""

import json
from pathlib import Path
from typing import List, Tuple

from pydantic import ValidationError
import logging

from config.settings import HISTORY_FILE, HISTORY_KEY
from models.schemas import ExamResult

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class HistoryStore:
    """Keeps finished exams newest-first in a JSON file under a fixed key.

    The file is read once on ``load`` and rewritten in full whenever a
    result is added.
    """

    def __init__(self, path=HISTORY_FILE, key: str = HISTORY_KEY):
        self.path = Path(path)
        self.key = key
        self._results: List[ExamResult] = []

    @property
    def results(self) -> Tuple[ExamResult, ...]:
        return tuple(self._results)

    def load(self) -> Tuple[ExamResult, ...]:
        """Read history from disk; an unreadable file is treated as empty"""
        self._results = []
        if not self.path.exists():
            logger.info(f"No history found at {self.path}")
            return self.results

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                stored = json.load(f).get(self.key, [])
            if not isinstance(stored, list):
                raise ValueError(f"expected a list under '{self.key}', got {type(stored).__name__}")
            self._results = [ExamResult.model_validate(item) for item in stored]
        # ValueError covers JSONDecodeError and UnicodeDecodeError
        except (OSError, AttributeError, TypeError, ValueError, ValidationError) as e:
            logger.error(f"Failed to load exam history from {self.path}: {e}")
            self._results = []

        logger.info(f"✓ Loaded {len(self._results)} past exams")
        return self.results

    def append(self, result: ExamResult) -> None:
        self._results.insert(0, result)
        self.save()

    def clear(self) -> None:
        self._results = []
        self.save()

    def save(self) -> None:
        payload = {self.key: [r.model_dump(mode="json", by_alias=True) for r in self._results]}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
        except OSError as e:
            # History stays available in memory for this run
            logger.error(f"Failed to save exam history to {self.path}: {e}")
            return
        logger.info(f"Exam history saved to: {self.path}")
