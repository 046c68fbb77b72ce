# staffacademy/state.py

import logging
from typing import Optional

from PyQt6.QtCore import QObject, pyqtSignal

from staffacademy.fetcher import VideoItem
from staffacademy.library import (
    continue_watching, filter_videos, list_categories, related_videos
)
from staffacademy.progress import ProgressStore

logger = logging.getLogger(__name__)

VIEW_LIBRARY = "library"
VIEW_PLAYER = "player"

TRANSITION_SLIDE_LEFT = "slide-left"
TRANSITION_SLIDE_RIGHT = "slide-right"
TRANSITION_FADE = "fade"


def transition_for(entering_player: bool, previous_view: str) -> str:
    """Page transition: slide left into the player, slide right out of it."""
    if entering_player:
        return TRANSITION_SLIDE_LEFT
    if previous_view == VIEW_PLAYER:
        return TRANSITION_SLIDE_RIGHT
    return TRANSITION_FADE


class AppState(QObject):
    """
    Single owner of the shell's mutable state: the catalog, search filters,
    selected video and progress map. Views read from it and change it only
    through the setters below.
    """
    catalog_changed   = pyqtSignal()
    filters_changed   = pyqtSignal()
    # selected video (or None), transition style
    selection_changed = pyqtSignal(object, str)
    # id of the video whose progress changed
    progress_changed  = pyqtSignal(str)

    def __init__(self, store: ProgressStore):
        super().__init__()
        self.store = store
        self.videos: list[VideoItem] = []
        self.query = ""
        self.category: Optional[str] = None
        self.selected: Optional[VideoItem] = None
        self.last_view = VIEW_LIBRARY
        self.progress = store.load()

    # ── setters ──────────────────────────────────────────────

    def set_catalog(self, videos) -> None:
        self.videos = list(videos)
        self.catalog_changed.emit()

    def set_query(self, query: str) -> None:
        if query == self.query:
            return
        self.query = query
        self.filters_changed.emit()

    def set_category(self, category: Optional[str]) -> None:
        if category == self.category:
            return
        self.category = category
        self.filters_changed.emit()

    def select(self, video: VideoItem) -> str:
        """Show `video` in the player; returns the transition used."""
        return self._set_selected(video)

    def clear_selection(self) -> str:
        return self._set_selected(None)

    def record_progress(self, video_id: str, partial: dict) -> None:
        self.progress = self.store.update(video_id, partial)
        self.progress_changed.emit(video_id)

    def _set_selected(self, video: Optional[VideoItem]) -> str:
        anim = transition_for(video is not None, self.last_view)
        self.selected = video
        self.last_view = VIEW_PLAYER if video is not None else VIEW_LIBRARY
        logger.debug("View -> %s (%s)", self.last_view, anim)
        self.selection_changed.emit(video, anim)
        return anim

    # ── derived views ────────────────────────────────────────

    def visible_videos(self) -> list[VideoItem]:
        return filter_videos(self.videos, self.query, self.category)

    def categories(self) -> list[str]:
        return list_categories(self.videos)

    def continue_watching(self):
        return continue_watching(self.progress, self.videos)

    def related(self) -> list[VideoItem]:
        return related_videos(self.videos, self.selected)
