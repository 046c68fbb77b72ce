# staffacademy/progress.py

import json
import math
import logging
from dataclasses import dataclass
from typing import Any, Dict

logger = logging.getLogger(__name__)

# video id -> {"playedSeconds": float, "duration": float, "lastSeen": int (epoch ms)}
ProgressMap = Dict[str, Dict[str, Any]]


def _as_number(value, default=0):
    if isinstance(value, bool):
        return default
    try:
        number = value if isinstance(value, (int, float)) else float(value)
        # json accepts NaN, Infinity and overflowing literals like 1e400
        finite = math.isfinite(float(number))
    except (TypeError, ValueError, OverflowError):
        return default
    return number if finite else default


@dataclass
class ProgressRecord:
    """Last known playback position of one video."""

    played_seconds: float = 0.0
    duration: float = 0.0
    last_seen: int = 0

    @classmethod
    def from_dict(cls, data) -> "ProgressRecord":
        data = data if isinstance(data, dict) else {}
        return cls(
            played_seconds=_as_number(data.get("playedSeconds")),
            duration=_as_number(data.get("duration")),
            last_seen=_as_number(data.get("lastSeen")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "playedSeconds": self.played_seconds,
            "duration": self.duration,
            "lastSeen": self.last_seen,
        }


def merge_progress(progress: ProgressMap, video_id: str, partial: Dict[str, Any]) -> ProgressMap:
    """
    Return a new map with `partial` merged into the record for `video_id`.
    The input map and its records are left untouched.
    """
    merged = dict(progress or {})
    record = dict(merged.get(video_id) or {})
    record.update(partial or {})
    merged[video_id] = record
    return merged


class ProgressStore:
    """
    Persists the progress map as a single JSON object on disk.

    Reads never raise and writes are best effort: a corrupt or missing file
    loads as an empty map and failed writes are only logged.
    """

    def __init__(self, path: str):
        self.path = path
        self._progress: ProgressMap = {}

    @property
    def progress(self) -> ProgressMap:
        return self._progress

    def load(self) -> ProgressMap:
        """Read the progress file, falling back to an empty map."""
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            data = {}
        except (OSError, ValueError) as e:
            logger.warning("Discarding unreadable progress file %s: %s", self.path, e)
            data = {}

        if not isinstance(data, dict):
            logger.warning("Discarding malformed progress data in %s", self.path)
            data = {}

        self._progress = {
            str(video_id): record
            for video_id, record in data.items()
            if isinstance(record, dict)
        }
        return self._progress

    def save(self, progress: ProgressMap) -> None:
        """Overwrite the progress file with `progress`."""
        try:
            payload = json.dumps(progress)
            with open(self.path, "w", encoding="utf-8") as f:
                f.write(payload)
        except (OSError, TypeError, ValueError) as e:
            logger.warning("Could not save progress to %s: %s", self.path, e)

    def update(self, video_id: str, partial: Dict[str, Any]) -> ProgressMap:
        """Merge `partial` into one record, persist, and return the new map."""
        self._progress = merge_progress(self._progress, video_id, partial)
        self.save(self._progress)
        return self._progress
