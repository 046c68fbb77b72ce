"""
Unit tests for the network workers.
"""

import time

from PyQt6.QtCore import Qt, QThread

from staffacademy import workers
from staffacademy.playback import AspectBucket


def test_metadata_worker_emits_bucket(qapp, monkeypatch):
    monkeypatch.setattr(workers, "fetch_youtube_dimensions", lambda youtube_id: (1080, 1920))
    worker = workers.MetadataWorker()
    results = []
    worker.finished.connect(lambda video_id, bucket: results.append((video_id, bucket)))

    worker._on_lookup("onboard-1", "dQw4w9WgXcQ")
    assert results == [("onboard-1", AspectBucket.PORTRAIT)]


def test_metadata_worker_failure_defaults_widescreen(qapp, monkeypatch):
    monkeypatch.setattr(workers, "fetch_youtube_dimensions", lambda youtube_id: None)
    worker = workers.MetadataWorker()
    results = []
    worker.finished.connect(lambda video_id, bucket: results.append(bucket))

    worker._on_lookup("onboard-1", "dQw4w9WgXcQ")
    assert results == [AspectBucket.WIDESCREEN]


def _wait_for(condition, timeout=5.0):
    deadline = time.monotonic() + timeout
    while not condition() and time.monotonic() < deadline:
        time.sleep(0.01)
    return condition()


def _network_thread(*objects):
    thread = QThread()
    for obj in objects:
        obj.moveToThread(thread)
    thread.start()
    return thread


def _stop(thread):
    thread.quit()
    thread.wait()


def test_thumbnail_worker_skips_failures(qapp, monkeypatch):
    images = {"https://img/a.jpg": b"a", "https://img/b.jpg": None, "https://img/c.jpg": b"c"}
    calls = []

    def fake_fetch(url):
        calls.append(url)
        return images[url]

    monkeypatch.setattr(workers, "fetch_thumbnail", fake_fetch)
    worker = workers.ThumbnailWorker()
    loaded = []
    # direct connection: recorded on the network thread
    worker.loaded.connect(
        lambda video_id, data: loaded.append((video_id, data)),
        Qt.ConnectionType.DirectConnection,
    )
    thread = _network_thread(worker)
    try:
        for video_id in "abc":
            worker.fetch_request.emit(video_id, f"https://img/{video_id}.jpg")
        assert _wait_for(lambda: len(calls) == 3)
    finally:
        _stop(thread)
    assert loaded == [("a", b"a"), ("c", b"c")]


def test_metadata_lookup_runs_between_thumbnails(qapp, monkeypatch):
    order = []
    metadata_worker = workers.MetadataWorker()

    def fake_fetch(url):
        order.append(url)
        if len(order) == 1:
            # a video is opened while the first thumbnail downloads
            metadata_worker.lookup_request.emit("onboard-1", "dQw4w9WgXcQ")
        return None

    def fake_dimensions(youtube_id):
        order.append("metadata")
        return 1920, 1080

    monkeypatch.setattr(workers, "fetch_thumbnail", fake_fetch)
    monkeypatch.setattr(workers, "fetch_youtube_dimensions", fake_dimensions)
    thumb_worker = workers.ThumbnailWorker()
    thread = _network_thread(thumb_worker, metadata_worker)
    try:
        for video_id in "abc":
            thumb_worker.fetch_request.emit(video_id, video_id)
        assert _wait_for(lambda: len(order) == 4)
    finally:
        _stop(thread)
    assert order == ["a", "metadata", "b", "c"]
