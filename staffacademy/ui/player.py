# staffacademy/ui/player.py

import logging

from PyQt6.QtWidgets import (
    QHBoxLayout, QLabel, QPushButton, QSizePolicy, QSlider, QStackedWidget,
    QVBoxLayout, QWidget
)
from PyQt6.QtCore import Qt, QSize, QUrl, pyqtSignal, pyqtSlot
from PyQt6.QtGui import QDesktopServices
from PyQt6.QtMultimedia import QAudioOutput, QMediaMetaData, QMediaPlayer
from PyQt6.QtMultimediaWidgets import QVideoWidget
from PyQt6.QtWebEngineWidgets import QWebEngineView

from staffacademy.config import YOUTUBE_EMBED_URL
from staffacademy.playback import (
    AspectBucket, ListenerSet, PlayerState, detect_aspect_bucket, next_playback_rate
)
from staffacademy.utils import format_duration, now_ms

logger = logging.getLogger(__name__)


class AspectRatioFrame(QWidget):
    """
    Keeps its single child centered at a fixed width/height ratio.
    A ratio of None lets the child fill the frame (theatre mode).
    """
    def __init__(self, child: QWidget, ratio=AspectBucket.WIDESCREEN.ratio, parent=None):
        super().__init__(parent)
        self._child = child
        self._child.setParent(self)
        self._ratio = ratio
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self.setMinimumHeight(240)

    def sizeHint(self):
        return QSize(960, 540)

    @property
    def ratio(self):
        return self._ratio

    def set_ratio(self, ratio):
        self._ratio = ratio
        self._relayout()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self._relayout()

    def _relayout(self):
        w, h = self.width(), self.height()
        if not self._ratio or h <= 0:
            self._child.setGeometry(0, 0, w, h)
            return
        if w / h > self._ratio:
            cw, ch = int(h * self._ratio), h
        else:
            cw, ch = w, int(w / self._ratio)
        self._child.setGeometry((w - cw) // 2, (h - ch) // 2, cw, ch)


class PictureInPictureWindow(QWidget):
    """Small always-on-top window that borrows the native video output."""
    closed = pyqtSignal()

    def __init__(self):
        super().__init__(
            None,
            Qt.WindowType.Window
            | Qt.WindowType.Tool
            | Qt.WindowType.WindowStaysOnTopHint,
        )
        self.setWindowTitle("Picture in Picture")
        self.video_widget = QVideoWidget(self)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self.video_widget)
        self.resize(426, 240)

    def closeEvent(self, event):
        super().closeEvent(event)
        self.closed.emit()


class VideoPlayer(QWidget):
    """
    Plays one video at a time: YouTube links in an embedded web view,
    everything else through QMediaPlayer.

    Emits progress(video_id, {playedSeconds, duration, lastSeen}) on every
    position tick of native playback. Connections made for the active video
    are tracked in a ListenerSet and dropped before the next video loads.
    """
    progress           = pyqtSignal(str, dict)
    back_requested     = pyqtSignal()
    theatre_changed    = pyqtSignal(bool)
    # video id, youtube id
    metadata_requested = pyqtSignal(str, str)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.video = None
        self.state = PlayerState.IDLE
        self.aspect = AspectBucket.WIDESCREEN
        self.theatre = False
        self.speed = 1.0
        self._native = True
        self._pip = None
        self._listeners = ListenerSet()

        self._media = QMediaPlayer(self)
        self._audio = QAudioOutput(self)
        self._media.setAudioOutput(self._audio)

        self._build_ui()
        self._connect_signals()

    def _build_ui(self):
        vbox = QVBoxLayout(self)
        vbox.setContentsMargins(0, 0, 0, 0)

        # ── Playback surface ──────────────────────────────────
        self.videoWidget = QVideoWidget()
        self.webView = QWebEngineView()
        self.surface = QStackedWidget()
        self.surface.addWidget(self.videoWidget)
        self.surface.addWidget(self.webView)
        self._media.setVideoOutput(self.videoWidget)

        self.frame = AspectRatioFrame(self.surface)
        vbox.addWidget(self.frame, 1)

        # ── Native transport ──────────────────────────────────
        self.transport = QWidget()
        tl = QHBoxLayout(self.transport)
        tl.setContentsMargins(0, 0, 0, 0)
        self.playBtn = QPushButton("▶")
        self.seekSlider = QSlider(Qt.Orientation.Horizontal)
        self.seekSlider.setRange(0, 0)
        self.timeLabel = QLabel("0:00:00 / 0:00:00")
        tl.addWidget(self.playBtn)
        tl.addWidget(self.seekSlider, 1)
        tl.addWidget(self.timeLabel)
        vbox.addWidget(self.transport)

        # ── Title, description and controls ──────────────────
        info = QHBoxLayout()
        text = QVBoxLayout()
        self.titleLabel = QLabel()
        self.titleLabel.setStyleSheet("font-size: 18px; font-weight: 900;")
        self.titleLabel.setWordWrap(True)
        self.descriptionLabel = QLabel()
        self.descriptionLabel.setWordWrap(True)
        text.addWidget(self.titleLabel)
        text.addWidget(self.descriptionLabel)
        info.addLayout(text, 1)

        self.theatreBtn = QPushButton("🎬 Theatre")
        self.pipBtn = QPushButton("🖥 PiP")
        self.speedBtn = QPushButton("⚡ 1x")
        self.backBtn = QPushButton("← Back")
        self.rawBtn = QPushButton("Open Raw")
        for btn in (self.theatreBtn, self.pipBtn, self.speedBtn, self.backBtn, self.rawBtn):
            info.addWidget(btn, 0, Qt.AlignmentFlag.AlignTop)
        vbox.addLayout(info)

    def _connect_signals(self):
        """Wiring that lives as long as the widget, independent of the video."""
        self.playBtn.clicked.connect(self.toggle_play)
        self.seekSlider.sliderMoved.connect(self._media.setPosition)
        self._media.positionChanged.connect(self._update_position_ui)
        self._media.durationChanged.connect(self._update_duration_ui)
        self._media.playbackStateChanged.connect(self._update_play_button)

        self.theatreBtn.clicked.connect(self.toggle_theatre)
        self.pipBtn.clicked.connect(self.enter_pip)
        self.speedBtn.clicked.connect(self.cycle_speed)
        self.backBtn.clicked.connect(self.back_requested)
        self.rawBtn.clicked.connect(self.open_raw)

    # ── Video lifecycle ──────────────────────────────────────

    def set_video(self, video):
        """Detach from the current video and start the given one."""
        self._detach()
        self.video = video
        self.state = PlayerState.INITIALIZING
        self.speed = 1.0
        self._media.setPlaybackRate(self.speed)
        if self.theatre:
            self._set_theatre(False)
        self._set_aspect(AspectBucket.WIDESCREEN)

        self.titleLabel.setText(video.title)
        self.descriptionLabel.setText(video.description)

        youtube_id = video.youtube_id
        self._native = not youtube_id
        if youtube_id:
            self._media.setSource(QUrl())
            self.surface.setCurrentWidget(self.webView)
            self._listeners.bind(self.webView.loadFinished, self._on_page_loaded)
            self.webView.setUrl(QUrl(YOUTUBE_EMBED_URL.format(video_id=youtube_id)))
            self.metadata_requested.emit(video.id, youtube_id)
        else:
            self.webView.setUrl(QUrl("about:blank"))
            self.surface.setCurrentWidget(self.videoWidget)
            self._listeners.bind(self._media.mediaStatusChanged, self._on_media_status)
            self._listeners.bind(self._media.positionChanged, self._on_time_update)
            self._media.setSource(QUrl.fromUserInput(video.url))
            self._media.play()

        self._update_controls()
        logger.info("Playing %s (%s)", video.title, "youtube" if youtube_id else "native")

    def stop(self):
        """Leave the player: detach listeners and release the source."""
        self._detach()
        if self.theatre:
            self._set_theatre(False)
        self.video = None
        self.state = PlayerState.IDLE
        self._media.setSource(QUrl())
        self.webView.setUrl(QUrl("about:blank"))

    def shutdown(self):
        self.stop()
        if self._pip is not None:
            self._pip.deleteLater()
            self._pip = None

    def _detach(self):
        self._listeners.clear()
        self._exit_pip()
        self._media.stop()

    # ── Per-video listeners ──────────────────────────────────

    def _on_media_status(self, status):
        if status == QMediaPlayer.MediaStatus.InvalidMedia:
            logger.warning("Cannot play %s: %s", self.video.url if self.video else "", self._media.errorString())
            return
        if status not in (QMediaPlayer.MediaStatus.LoadedMedia, QMediaPlayer.MediaStatus.BufferedMedia):
            return
        if self.state is not PlayerState.INITIALIZING:
            return
        size = self._media.metaData().value(QMediaMetaData.Key.Resolution)
        width = size.width() if isinstance(size, QSize) and size.isValid() else 0
        height = size.height() if isinstance(size, QSize) and size.isValid() else 0
        self._set_aspect(detect_aspect_bucket(width, height))
        self.state = PlayerState.PLAYING

    @pyqtSlot("qint64")
    def _on_time_update(self, position_ms):
        if self.video is None:
            return
        duration_ms = self._media.duration()
        self.progress.emit(self.video.id, {
            "playedSeconds": position_ms / 1000.0,
            "duration": duration_ms / 1000.0 if duration_ms > 0 else 0,
            "lastSeen": now_ms(),
        })

    @pyqtSlot(bool)
    def _on_page_loaded(self, ok):
        if ok:
            self.state = PlayerState.PLAYING
        else:
            logger.warning("Embedded player failed to load for %s", self.video.url if self.video else "")

    @pyqtSlot(str, object)
    def apply_metadata(self, video_id, bucket):
        """Aspect bucket from the YouTube lookup; stale results are ignored."""
        if self.video is None or video_id != self.video.id:
            return
        self._set_aspect(bucket if isinstance(bucket, AspectBucket) else AspectBucket.WIDESCREEN)

    # ── Controls ─────────────────────────────────────────────

    @pyqtSlot()
    def toggle_play(self):
        if self._media.playbackState() == QMediaPlayer.PlaybackState.PlayingState:
            self._media.pause()
        else:
            self._media.play()

    @pyqtSlot()
    def toggle_theatre(self):
        self._set_theatre(not self.theatre)

    def _set_theatre(self, on):
        self.theatre = on
        self.frame.set_ratio(None if on else self.aspect.ratio)
        self.theatreBtn.setText("🎬 Exit Theatre" if on else "🎬 Theatre")
        self.theatre_changed.emit(on)

    def _set_aspect(self, bucket):
        self.aspect = bucket
        self.frame.setToolTip(bucket.value)
        if not self.theatre:
            self.frame.set_ratio(bucket.ratio)

    @pyqtSlot()
    def cycle_speed(self):
        if not self._native or self.video is None:
            return
        self.speed = next_playback_rate(self.speed)
        self._media.setPlaybackRate(self.speed)
        self.speedBtn.setText(f"⚡ {self.speed:g}x")

    @pyqtSlot()
    def enter_pip(self):
        if not self._native or self.video is None:
            return
        try:
            if self._pip is None:
                self._pip = PictureInPictureWindow()
                self._pip.closed.connect(self._on_pip_closed)
            self._media.setVideoOutput(self._pip.video_widget)
            self._pip.setWindowTitle(self.video.title)
            self._pip.show()
            self._pip.raise_()
        except Exception:
            logger.debug("Picture-in-picture unavailable", exc_info=True)

    def _exit_pip(self):
        if self._pip is not None and self._pip.isVisible():
            self._pip.close()

    @pyqtSlot()
    def _on_pip_closed(self):
        self._media.setVideoOutput(self.videoWidget)

    @pyqtSlot()
    def open_raw(self):
        if self.video is not None:
            QDesktopServices.openUrl(QUrl.fromUserInput(self.video.url))

    # ── UI refresh ───────────────────────────────────────────

    def _update_controls(self):
        self.transport.setVisible(self._native)
        self.pipBtn.setVisible(self._native)
        self.speedBtn.setVisible(self._native)
        self.speedBtn.setText(f"⚡ {self.speed:g}x")

    @pyqtSlot("qint64")
    def _update_position_ui(self, position_ms):
        if not self.seekSlider.isSliderDown():
            self.seekSlider.setValue(int(position_ms))
        self.timeLabel.setText(
            f"{format_duration(position_ms / 1000)} / {format_duration(self._media.duration() / 1000)}"
        )

    @pyqtSlot("qint64")
    def _update_duration_ui(self, duration_ms):
        self.seekSlider.setRange(0, int(duration_ms))

    def _update_play_button(self, state):
        playing = state == QMediaPlayer.PlaybackState.PlayingState
        self.playBtn.setText("⏸" if playing else "▶")
