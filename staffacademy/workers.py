# staffacademy/workers.py

import logging
from collections import deque

from PyQt6.QtCore import QObject, QThread, Qt, pyqtSignal, pyqtSlot

from staffacademy.fetcher import CatalogFetcher
from staffacademy.lookup import fetch_thumbnail, fetch_youtube_dimensions
from staffacademy.playback import detect_aspect_bucket

logger = logging.getLogger(__name__)


class CatalogWorker(QObject):
    """
    Worker to fetch the video manifest in its own thread.
    Emits finished(list_of_videos); an empty list means the fetch failed.
    The thread is asked to quit once the single fetch is done.
    """
    fetch_request = pyqtSignal(str)
    finished      = pyqtSignal(list)

    def __init__(self, fetcher: CatalogFetcher):
        super().__init__()
        self.fetcher = fetcher
        self.fetch_request.connect(self._on_fetch, Qt.ConnectionType.QueuedConnection)

    @pyqtSlot(str)
    def _on_fetch(self, source: str):
        """Triggered when fetch_request is emitted."""
        items = []
        try:
            items = self.fetcher.fetch_catalog(source)
        except Exception:
            logger.exception("Unexpected error loading %s", source)
        finally:
            self.finished.emit(items)
            QThread.currentThread().quit()


class MetadataWorker(QObject):
    """
    Looks up YouTube frame sizes on the network thread.
    Emits finished(video_id, AspectBucket); failures resolve to 16:9.
    """
    # video id, youtube id
    lookup_request = pyqtSignal(str, str)
    finished       = pyqtSignal(str, object)

    def __init__(self):
        super().__init__()
        self.lookup_request.connect(self._on_lookup, Qt.ConnectionType.QueuedConnection)

    @pyqtSlot(str, str)
    def _on_lookup(self, video_id: str, youtube_id: str):
        dims = fetch_youtube_dimensions(youtube_id)
        width, height = dims if dims else (0, 0)
        self.finished.emit(video_id, detect_aspect_bucket(width, height))


class ThumbnailWorker(QObject):
    """
    Downloads thumbnails on the network thread, one per event loop pass.
    Requests are queued and each download posts the next one, so metadata
    lookups requested meanwhile run between downloads.
    Emits loaded(video_id, image_bytes) for each successful download.
    """
    # video id, thumbnail url
    fetch_request = pyqtSignal(str, str)
    loaded        = pyqtSignal(str, bytes)
    _next_request = pyqtSignal()

    def __init__(self):
        super().__init__()
        self._pending = deque()
        self._scheduled = False
        self.fetch_request.connect(self._on_fetch, Qt.ConnectionType.QueuedConnection)
        self._next_request.connect(self._fetch_next, Qt.ConnectionType.QueuedConnection)

    @pyqtSlot(str, str)
    def _on_fetch(self, video_id: str, url: str):
        self._pending.append((video_id, url))
        self._schedule()

    def _schedule(self):
        if self._pending and not self._scheduled:
            self._scheduled = True
            self._next_request.emit()

    @pyqtSlot()
    def _fetch_next(self):
        self._scheduled = False
        if not self._pending or QThread.currentThread().isInterruptionRequested():
            return
        video_id, url = self._pending.popleft()
        data = fetch_thumbnail(url)
        if data:
            self.loaded.emit(video_id, data)
        self._schedule()
