# staffacademy/models.py

from datetime import datetime

from PyQt6.QtCore import Qt, QAbstractTableModel, QModelIndex

from staffacademy.utils import format_duration, percent_watched


class VideoTableModel(QAbstractTableModel):
    """
    Table model for the course library.
    Columns: [Title, Category, Type, Uploaded, Progress]
    """
    HEADERS = ["Title", "Category", "Type", "Uploaded", "Progress"]
    PROGRESS_COLUMN = 4

    def __init__(self, items=None):
        super().__init__()
        self._items = []
        self._progress = {}
        self._thumbnails = {}
        if items:
            self.set_items(items)

    def rowCount(self, parent=QModelIndex()):
        return len(self._items)

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    def data(self, index, role=Qt.ItemDataRole.DisplayRole):
        if not index.isValid():
            return None
        item = self._items[index.row()]
        col = index.column()

        if role == Qt.ItemDataRole.DisplayRole:
            if col == 0:
                return item.title
            if col == 1:
                return item.category
            if col == 2:
                return "YouTube" if item.is_youtube else "External"
            if col == 3:
                return item.uploaded_at.strftime("%Y-%m-%d")
            if col == 4:
                # e.g. "42%", parsed back by the progress bar delegate
                record = self._progress.get(item.id) or {}
                return f"{percent_watched(record.get('playedSeconds'), record.get('duration'))}%"

        if role == Qt.ItemDataRole.ToolTipRole and col == 0:
            return item.description or item.title

        if role == Qt.ItemDataRole.DecorationRole and col == 0:
            return self._thumbnails.get(item.id)

        return None

    def headerData(self, section, orientation, role=Qt.ItemDataRole.DisplayRole):
        if orientation == Qt.Orientation.Horizontal and role == Qt.ItemDataRole.DisplayRole:
            return self.HEADERS[section]
        return None

    def flags(self, index):
        if not index.isValid():
            return Qt.ItemFlag.NoItemFlags
        # all cells read-only
        return Qt.ItemFlag.ItemIsEnabled | Qt.ItemFlag.ItemIsSelectable

    def set_items(self, items):
        """Replace the visible videos."""
        self.beginResetModel()
        self._items = list(items)
        self.endResetModel()

    def item_at(self, row):
        if 0 <= row < len(self._items):
            return self._items[row]
        return None

    def set_progress(self, progress):
        """Refresh the progress column from the progress map."""
        self._progress = progress or {}
        if self._items:
            top = self.index(0, self.PROGRESS_COLUMN)
            bot = self.index(len(self._items) - 1, self.PROGRESS_COLUMN)
            self.dataChanged.emit(top, bot, [Qt.ItemDataRole.DisplayRole])

    def set_thumbnail(self, video_id, image):
        """Attach a thumbnail to every row showing `video_id`."""
        self._thumbnails[video_id] = image
        for row, it in enumerate(self._items):
            if it.id == video_id:
                idx = self.index(row, 0)
                self.dataChanged.emit(idx, idx, [Qt.ItemDataRole.DecorationRole])


class ContinueWatchingModel(QAbstractTableModel):
    """
    Table model for partially watched videos, most recent first.
    Columns: [Title, Watched, Position, Last Seen]
    """
    HEADERS = ["Title", "Watched", "Position", "Last Seen"]

    def __init__(self, entries=None):
        super().__init__()
        self._entries = []
        if entries:
            self.set_entries(entries)

    def rowCount(self, parent=QModelIndex()):
        return len(self._entries)

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    def data(self, index, role=Qt.ItemDataRole.DisplayRole):
        if not index.isValid():
            return None
        entry = self._entries[index.row()]
        col = index.column()

        if role == Qt.ItemDataRole.DisplayRole:
            if col == 0:
                return entry.video.title
            if col == 1:
                return f"{entry.percent}% watched"
            if col == 2:
                return (
                    f"{format_duration(entry.record.played_seconds)} / "
                    f"{format_duration(entry.record.duration)}"
                )
            if col == 3:
                if not entry.record.last_seen:
                    return ""
                try:
                    seen = datetime.fromtimestamp(entry.record.last_seen / 1000)
                except (OverflowError, OSError, ValueError):
                    return ""
                return seen.strftime("%Y-%m-%d %H:%M")
        return None

    def headerData(self, section, orientation, role=Qt.ItemDataRole.DisplayRole):
        if orientation == Qt.Orientation.Horizontal and role == Qt.ItemDataRole.DisplayRole:
            return self.HEADERS[section]
        return None

    def flags(self, index):
        if not index.isValid():
            return Qt.ItemFlag.NoItemFlags
        return Qt.ItemFlag.ItemIsEnabled | Qt.ItemFlag.ItemIsSelectable

    def set_entries(self, entries):
        self.beginResetModel()
        self._entries = list(entries)
        self.endResetModel()

    def video_at(self, row):
        if 0 <= row < len(self._entries):
            return self._entries[row].video
        return None
