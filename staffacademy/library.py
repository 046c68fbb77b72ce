# staffacademy/library.py

from dataclasses import dataclass
from typing import Optional

from staffacademy.fetcher import VideoItem
from staffacademy.progress import ProgressMap, ProgressRecord
from staffacademy.utils import percent_watched


@dataclass
class ContinueWatchingEntry:
    """A catalog video paired with its saved progress."""
    video: VideoItem
    record: ProgressRecord

    @property
    def percent(self) -> int:
        return percent_watched(self.record.played_seconds, self.record.duration)


def _matches(video: VideoItem, needle: str) -> bool:
    return (
        needle in video.title.lower()
        or needle in (video.description or "").lower()
        or needle in (video.category or "").lower()
    )


def filter_videos(videos, query: str = "", category: Optional[str] = None) -> list[VideoItem]:
    """
    Return the visible subset of the catalog, in catalog order.

    A video is kept when it is in `category` (if one is given) and the
    trimmed, case-insensitive `query` occurs in its title, description or
    category (if a query is given).
    """
    needle = (query or "").strip().lower()
    visible = []
    for v in videos:
        if category and v.category != category:
            continue
        if needle and not _matches(v, needle):
            continue
        visible.append(v)
    return visible


def list_categories(videos) -> list[str]:
    """Distinct categories in order of first appearance."""
    seen = {}
    for v in videos:
        seen.setdefault(v.category, None)
    return list(seen)


def continue_watching(progress: ProgressMap, videos) -> list[ContinueWatchingEntry]:
    """
    Join progress records to catalog videos by id, most recently seen first.
    Records for videos missing from the catalog are dropped.
    """
    by_id = {v.id: v for v in videos}
    entries = [
        ContinueWatchingEntry(by_id[video_id], ProgressRecord.from_dict(data))
        for video_id, data in (progress or {}).items()
        if video_id in by_id
    ]
    entries.sort(key=lambda e: e.record.last_seen or 0, reverse=True)
    return entries


def related_videos(videos, selected: Optional[VideoItem], limit: int = 6) -> list[VideoItem]:
    """Other videos from the selected video's category, in catalog order."""
    if selected is None:
        return []
    related = [v for v in videos if v.id != selected.id and v.category == selected.category]
    return related[:limit]
