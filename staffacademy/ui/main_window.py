# staffacademy/ui/main_window.py

import logging

from PyQt6.QtWidgets import (
    QAbstractItemView, QApplication, QFrame, QGraphicsOpacityEffect,
    QHBoxLayout, QHeaderView, QLabel, QLineEdit, QListWidget, QListWidgetItem,
    QMainWindow, QPushButton, QScrollArea, QStackedWidget, QStyle,
    QStyledItemDelegate, QStyleOptionProgressBar, QTabWidget, QTableView,
    QTextEdit, QVBoxLayout, QWidget
)
from PyQt6.QtCore import (
    Qt, QEasingCurve, QObject, QPoint, QPropertyAnimation, QSize, QThread,
    QUrl, pyqtSignal, pyqtSlot
)
from PyQt6.QtGui import QDesktopServices, QKeySequence, QPainter, QPixmap, QShortcut

from staffacademy.config import ConfigManager
from staffacademy.fetcher import CatalogFetcher
from staffacademy.models import ContinueWatchingModel, VideoTableModel
from staffacademy.progress import ProgressStore
from staffacademy.state import AppState, TRANSITION_FADE, TRANSITION_SLIDE_LEFT
from staffacademy.ui.player import VideoPlayer
from staffacademy.utils import youtube_thumbnail_url
from staffacademy.workers import CatalogWorker, MetadataWorker, ThumbnailWorker

logger = logging.getLogger(__name__)

SIDEBAR_WIDTH = 240
SIDEBAR_COLLAPSED_WIDTH = 64
THUMBNAIL_SIZE = QSize(96, 54)


class ProgressBarDelegate(QStyledItemDelegate):
    """Render a watch-progress bar from a "NN%" cell."""
    def paint(self, painter: QPainter, option, index):
        raw = index.data(Qt.ItemDataRole.DisplayRole) or ""
        try:
            value = int(raw.rstrip("%"))
        except ValueError:
            value = 0
        value = max(0, min(value, 100))

        opt = QStyleOptionProgressBar()
        opt.rect = option.rect
        opt.minimum, opt.maximum = 0, 100
        opt.progress = value
        opt.text = f"{value}%"
        opt.textVisible = True
        opt.textAlignment = Qt.AlignmentFlag.AlignCenter

        painter.save()
        QApplication.style().drawControl(
            QStyle.ControlElement.CE_ProgressBar, opt, painter
        )
        painter.restore()


class LogEmitter(QObject):
    message = pyqtSignal(str)


class QtLogHandler(logging.Handler):
    """
    Mirrors log records into the Complete Log tab. Records from worker
    threads reach the GUI thread through a queued signal.
    """
    def __init__(self, level=logging.INFO):
        super().__init__(level)
        self.emitter = LogEmitter()
        self.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s", "%H:%M:%S"))

    def emit(self, record):
        try:
            msg = self.format(record)
        except Exception:
            self.handleError(record)
            return
        self.emitter.message.emit(msg)


class MainWindow(QMainWindow):
    """Main application window for StaffAcademy."""
    def __init__(self, config: ConfigManager):
        super().__init__()

        # ── Window setup ───────────────────────────────────────
        self.setWindowTitle("StaffAcademy")
        self.resize(1200, 800)
        self.config = config

        # ── Core components ───────────────────────────────────
        self.store = ProgressStore(config.progress_path)
        self.state = AppState(self.store)
        self.fetcher = CatalogFetcher()

        # ── Data models ───────────────────────────────────────
        self.videoModel    = VideoTableModel([])
        self.continueModel = ContinueWatchingModel([])

        # ── Build UI + wire signals ───────────────────────────
        self._log_handler = QtLogHandler()
        self._build_ui()
        self._connect_signals()
        self._install_shortcuts()
        self._set_sidebar_collapsed(config.sidebar_collapsed)

        # placeholders for fetch thread & worker
        self._fetch_thread = None
        self._fetch_worker = None
        self._animation = None

        self._start_network_thread()
        self._refresh_progress_views()
        self._start_catalog_fetch()

    def _build_ui(self):
        """Construct all widgets and layouts."""
        central = QWidget()
        self.setCentralWidget(central)
        hbox = QHBoxLayout(central)

        # ── Sidebar ───────────────────────────────────────────
        self.sidebar = QFrame()
        self.sidebar.setFrameShape(QFrame.Shape.StyledPanel)
        side = QVBoxLayout(self.sidebar)

        top = QHBoxLayout()
        self.brandLabel = QLabel("<b>STAFF ACADEMY</b><br><small>Staff Training</small>")
        self.collapseBtn = QPushButton("«")
        self.collapseBtn.setToolTip("Collapse sidebar")
        top.addWidget(self.brandLabel)
        top.addStretch(1)
        top.addWidget(self.collapseBtn)
        side.addLayout(top)

        self.allVideosBtn = QPushButton("All Videos")
        side.addWidget(self.allVideosBtn)
        self.categoriesLabel = QLabel("Categories")
        side.addWidget(self.categoriesLabel)
        self.categoryList = QListWidget()
        side.addWidget(self.categoryList, 1)
        hbox.addWidget(self.sidebar)

        # ── Tabs container ────────────────────────────────────
        self.tabs = QTabWidget()
        hbox.addWidget(self.tabs, 1)

        # --- Tab: Academy ---
        tab_main = QWidget()
        main_layout = QVBoxLayout(tab_main)

        # header + Library button
        self.headerWidget = QWidget()
        h1 = QHBoxLayout(self.headerWidget)
        h1.setContentsMargins(0, 0, 0, 0)
        h1.addWidget(QLabel(
            "<span style='font-size:20px; font-weight:900'>Staff Academy</span>"
            "<br><small>Internal training library</small>"
        ))
        h1.addStretch(1)
        self.libraryBtn = QPushButton("Library")
        h1.addWidget(self.libraryBtn)
        main_layout.addWidget(self.headerWidget)

        # search + filter reset
        self.searchRow = QWidget()
        h2 = QHBoxLayout(self.searchRow)
        h2.setContentsMargins(0, 0, 0, 0)
        self.searchEdit = QLineEdit()
        self.searchEdit.setObjectName("searchbar")
        self.searchEdit.setPlaceholderText("Search courses, descriptions, categories...  ( / )")
        self.searchEdit.setClearButtonEnabled(True)
        self.allFilterBtn = QPushButton("All")
        h2.addWidget(self.searchEdit, 1)
        h2.addWidget(self.allFilterBtn)
        main_layout.addWidget(self.searchRow)

        self.pages = QStackedWidget()
        main_layout.addWidget(self.pages, 1)

        # library page
        self.libraryPage = QWidget()
        lib = QVBoxLayout(self.libraryPage)
        lib.setContentsMargins(0, 0, 0, 0)

        self.continueLabel = QLabel("Continue Watching")
        self.continueTable = QTableView()
        self.continueTable.setModel(self.continueModel)
        self._setup_table(self.continueTable)
        self.continueTable.setMaximumHeight(150)
        self.continueTable.horizontalHeader().setSectionResizeMode(0, QHeaderView.ResizeMode.Stretch)
        lib.addWidget(self.continueLabel)
        lib.addWidget(self.continueTable)

        self.libraryLabel = QLabel("<b>Course Library</b>")
        lib.addWidget(self.libraryLabel)
        self.videoTable = QTableView()
        self.videoTable.setModel(self.videoModel)
        self._setup_table(self.videoTable)
        self.videoTable.setIconSize(THUMBNAIL_SIZE)
        self.videoTable.verticalHeader().setDefaultSectionSize(THUMBNAIL_SIZE.height() + 6)
        self.videoTable.setItemDelegateForColumn(
            VideoTableModel.PROGRESS_COLUMN, ProgressBarDelegate(self.videoTable)
        )
        vt_hdr = self.videoTable.horizontalHeader()
        for col, mode in enumerate([
            QHeaderView.ResizeMode.Stretch,
            QHeaderView.ResizeMode.ResizeToContents,
            QHeaderView.ResizeMode.ResizeToContents,
            QHeaderView.ResizeMode.ResizeToContents,
            QHeaderView.ResizeMode.Interactive
        ]):
            vt_hdr.setSectionResizeMode(col, mode)
        lib.addWidget(self.videoTable, 1)

        h3 = QHBoxLayout()
        h3.addStretch(1)
        self.playBtn = QPushButton("Play")
        self.openBtn = QPushButton("Open")
        h3.addWidget(self.playBtn)
        h3.addWidget(self.openBtn)
        lib.addLayout(h3)
        self.pages.addWidget(self.libraryPage)

        # player page
        self.playerScroll = QScrollArea()
        self.playerScroll.setWidgetResizable(True)
        player_page = QWidget()
        pl = QVBoxLayout(player_page)
        self.player = VideoPlayer()
        self.player.setMinimumHeight(480)
        pl.addWidget(self.player, 1)
        self.relatedLabel = QLabel("<b>Related</b>")
        self.relatedList = QListWidget()
        self.relatedList.setMaximumHeight(180)
        pl.addWidget(self.relatedLabel)
        pl.addWidget(self.relatedList)
        self.playerScroll.setWidget(player_page)
        self.pages.addWidget(self.playerScroll)

        self.tabs.addTab(tab_main, "Academy")

        # --- Tab: Complete Log ---
        tab_log = QWidget()
        log_layout = QVBoxLayout(tab_log)
        self.logView = QTextEdit()
        self.logView.setReadOnly(True)
        log_layout.addWidget(self.logView)
        self.tabs.addTab(tab_log, "Complete Log")

    def _setup_table(self, table: QTableView):
        table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        table.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        table.setEditTriggers(QTableView.EditTrigger.NoEditTriggers)
        table.verticalHeader().setVisible(False)

    def _connect_signals(self):
        """Hook up widgets, app state, the player and logging."""
        # filters
        self.searchEdit.textChanged.connect(self.state.set_query)
        self.allFilterBtn.clicked.connect(self.on_show_all)
        self.allVideosBtn.clicked.connect(self.on_show_all)
        self.categoryList.itemClicked.connect(self.on_category_clicked)
        self.collapseBtn.clicked.connect(self.on_toggle_sidebar)
        self.libraryBtn.clicked.connect(self.on_library_clicked)

        # selection
        self.videoTable.doubleClicked.connect(self.on_video_activated)
        self.continueTable.doubleClicked.connect(self.on_continue_activated)
        self.relatedList.itemActivated.connect(self.on_related_activated)
        self.playBtn.clicked.connect(self.on_play_clicked)
        self.openBtn.clicked.connect(self.on_open_clicked)

        # app state
        self.state.catalog_changed.connect(self.on_catalog_changed)
        self.state.filters_changed.connect(self.on_filters_changed)
        self.state.selection_changed.connect(self.on_selection_changed)
        self.state.progress_changed.connect(self.on_progress_changed)

        # player
        self.player.progress.connect(self.state.record_progress)
        self.player.back_requested.connect(self.on_back)
        self.player.theatre_changed.connect(self.on_theatre_changed)

        # log tab
        self._log_handler.emitter.message.connect(self.logView.append)
        logging.getLogger().addHandler(self._log_handler)

    def _install_shortcuts(self):
        # QLineEdit claims "/" while it has focus, so typing still works there
        self._search_shortcut = QShortcut(QKeySequence("/"), self)
        self._search_shortcut.activated.connect(self._focus_search)
        self._escape_shortcut = QShortcut(QKeySequence(Qt.Key.Key_Escape), self)
        self._escape_shortcut.activated.connect(self.on_back)

    # ── Background work ──────────────────────────────────────

    def _start_network_thread(self):
        """Long-lived thread for YouTube metadata and thumbnail lookups."""
        self._net_thread = QThread(self)
        self._metadata_worker = MetadataWorker()
        self._thumb_worker = ThumbnailWorker()
        self._metadata_worker.moveToThread(self._net_thread)
        self._thumb_worker.moveToThread(self._net_thread)

        self.player.metadata_requested.connect(self._metadata_worker.lookup_request)
        self._metadata_worker.finished.connect(self.player.apply_metadata)
        self._thumb_worker.loaded.connect(self._on_thumbnail_loaded)
        self._net_thread.start()

    def _start_catalog_fetch(self):
        """Fetch the manifest once, off the GUI thread."""
        self.statusBar().showMessage("Loading videos…")
        self._fetch_thread = QThread(self)
        self._fetch_worker = CatalogWorker(self.fetcher)
        self._fetch_worker.moveToThread(self._fetch_thread)

        self._fetch_worker.finished.connect(self._handle_fetch_done)
        self._fetch_thread.finished.connect(self._cleanup_fetch_thread)

        self._fetch_thread.start()
        self._fetch_worker.fetch_request.emit(self.config.manifest_source)

    @pyqtSlot(list)
    def _handle_fetch_done(self, items: list):
        self.state.set_catalog(items)
        if not items:
            self.statusBar().showMessage("No videos loaded. See the Complete Log tab.")
            return
        self.statusBar().showMessage(f"Loaded {len(items)} videos.")

        for v in items:
            if v.youtube_id:
                self._thumb_worker.fetch_request.emit(v.id, youtube_thumbnail_url(v.youtube_id))

    def _cleanup_fetch_thread(self):
        """Tear down fetch thread & worker to avoid leaks."""
        if self._fetch_worker:
            self._fetch_worker.deleteLater()
        if self._fetch_thread:
            self._fetch_thread.quit()
            self._fetch_thread.wait()
            self._fetch_thread.deleteLater()
        self._fetch_worker = None
        self._fetch_thread = None

    @pyqtSlot(str, bytes)
    def _on_thumbnail_loaded(self, video_id: str, data: bytes):
        pixmap = QPixmap()
        if not pixmap.loadFromData(data):
            logger.debug("Unreadable thumbnail for %s", video_id)
            return
        self.videoModel.set_thumbnail(video_id, pixmap.scaled(
            THUMBNAIL_SIZE,
            Qt.AspectRatioMode.KeepAspectRatio,
            Qt.TransformationMode.SmoothTransformation,
        ))

    # ── State → view ─────────────────────────────────────────

    @pyqtSlot()
    def on_catalog_changed(self):
        self._populate_categories()
        self.on_filters_changed()
        self._refresh_progress_views()

    @pyqtSlot()
    def on_filters_changed(self):
        self.videoModel.set_items(self.state.visible_videos())
        self._highlight_category()
        title = "<b>Course Library</b>"
        if self.state.category:
            title += f" · {self.state.category}"
        self.libraryLabel.setText(title)

    @pyqtSlot(str)
    def on_progress_changed(self, video_id: str):
        self._refresh_progress_views()

    def _refresh_progress_views(self):
        self.videoModel.set_progress(self.state.progress)
        entries = self.state.continue_watching()
        self.continueModel.set_entries(entries)
        self.continueLabel.setVisible(bool(entries))
        self.continueTable.setVisible(bool(entries))

    @pyqtSlot(object, str)
    def on_selection_changed(self, video, anim: str):
        if video is not None:
            self.player.set_video(video)
            self._populate_related()
            self.pages.setCurrentWidget(self.playerScroll)
            self.playerScroll.verticalScrollBar().setValue(0)
        else:
            self.player.stop()
            self.pages.setCurrentWidget(self.libraryPage)
        self._animate_page(self.pages.currentWidget(), anim)

    def _populate_categories(self):
        collapsed = self.config.sidebar_collapsed
        self.categoryList.clear()
        for c in self.state.categories():
            item = QListWidgetItem(c[:1] if collapsed else c)
            item.setData(Qt.ItemDataRole.UserRole, c)
            item.setToolTip(c)
            self.categoryList.addItem(item)
        self._highlight_category()

    def _highlight_category(self):
        self.categoryList.clearSelection()
        for row in range(self.categoryList.count()):
            item = self.categoryList.item(row)
            if item.data(Qt.ItemDataRole.UserRole) == self.state.category:
                self.categoryList.setCurrentItem(item)

    def _populate_related(self):
        self.relatedList.clear()
        related = self.state.related()
        for v in related:
            item = QListWidgetItem(f"{v.title}  ·  {v.category}")
            item.setData(Qt.ItemDataRole.UserRole, v)
            self.relatedList.addItem(item)
        self.relatedLabel.setVisible(bool(related))
        self.relatedList.setVisible(bool(related))

    def _animate_page(self, page: QWidget, anim: str):
        """Cosmetic page transition."""
        if anim == TRANSITION_FADE:
            effect = QGraphicsOpacityEffect(page)
            page.setGraphicsEffect(effect)
            animation = QPropertyAnimation(effect, b"opacity", self)
            animation.setStartValue(0.0)
            animation.setEndValue(1.0)
            animation.finished.connect(lambda: page.setGraphicsEffect(None))
        else:
            end = page.pos()
            offset = 40 if anim == TRANSITION_SLIDE_LEFT else -40
            animation = QPropertyAnimation(page, b"pos", self)
            animation.setStartValue(end + QPoint(offset, 0))
            animation.setEndValue(end)
        animation.setDuration(220)
        animation.setEasingCurve(QEasingCurve.Type.OutCubic)
        if self._animation is not None:
            self._animation.stop()
        self._animation = animation
        animation.start()

    # ── Slots ────────────────────────────────────────────────

    @pyqtSlot()
    def on_show_all(self):
        self.state.set_category(None)

    @pyqtSlot(QListWidgetItem)
    def on_category_clicked(self, item):
        self.state.set_category(item.data(Qt.ItemDataRole.UserRole))

    @pyqtSlot()
    def on_library_clicked(self):
        """Back to the full library."""
        self.state.clear_selection()
        self.state.set_category(None)

    @pyqtSlot()
    def on_back(self):
        if self.state.selected is not None:
            self.state.clear_selection()

    @pyqtSlot("QModelIndex")
    def on_video_activated(self, index):
        video = self.videoModel.item_at(index.row())
        if video is not None:
            self.state.select(video)

    @pyqtSlot("QModelIndex")
    def on_continue_activated(self, index):
        video = self.continueModel.video_at(index.row())
        if video is not None:
            self.state.select(video)

    @pyqtSlot(QListWidgetItem)
    def on_related_activated(self, item):
        self.state.select(item.data(Qt.ItemDataRole.UserRole))

    @pyqtSlot()
    def on_play_clicked(self):
        video = self.videoModel.item_at(self.videoTable.currentIndex().row())
        if video is not None:
            self.state.select(video)

    @pyqtSlot()
    def on_open_clicked(self):
        """Open the selected video's source in the system browser."""
        video = self.videoModel.item_at(self.videoTable.currentIndex().row())
        if video is not None:
            QDesktopServices.openUrl(QUrl.fromUserInput(video.url))

    @pyqtSlot()
    def on_toggle_sidebar(self):
        self._set_sidebar_collapsed(not self.config.sidebar_collapsed)
        self.config.save()

    def _set_sidebar_collapsed(self, collapsed: bool):
        self.config.sidebar_collapsed = collapsed
        self.sidebar.setFixedWidth(SIDEBAR_COLLAPSED_WIDTH if collapsed else SIDEBAR_WIDTH)
        self.brandLabel.setVisible(not collapsed)
        self.categoriesLabel.setVisible(not collapsed)
        self.collapseBtn.setText("☰" if collapsed else "«")
        self.collapseBtn.setToolTip("Expand sidebar" if collapsed else "Collapse sidebar")
        self.allVideosBtn.setText("🏠" if collapsed else "All Videos")
        self._populate_categories()

    @pyqtSlot(bool)
    def on_theatre_changed(self, on: bool):
        """Theatre mode hides the shell chrome around the player."""
        for w in (self.sidebar, self.headerWidget, self.searchRow):
            w.setVisible(not on)
        related = bool(self.relatedList.count())
        self.relatedLabel.setVisible(related and not on)
        self.relatedList.setVisible(related and not on)
        if on:
            self.playerScroll.verticalScrollBar().setValue(0)

    @pyqtSlot()
    def _focus_search(self):
        if self.state.selected is None:
            self.tabs.setCurrentIndex(0)
            self.searchEdit.setFocus()
            self.searchEdit.selectAll()

    def closeEvent(self, event):
        """Stop playback and join background threads before closing."""
        self.player.shutdown()
        logging.getLogger().removeHandler(self._log_handler)
        self._net_thread.requestInterruption()
        self._net_thread.quit()
        self._net_thread.wait()
        self._cleanup_fetch_thread()
        super().closeEvent(event)
