"""
Unit tests for player logic that does not need widgets.
"""

import pytest
from PyQt6.QtCore import QObject, pyqtSignal

from staffacademy.playback import (
    AspectBucket, ListenerSet, detect_aspect_bucket, next_playback_rate
)


class TestAspectBucket:
    """Display ratio classification."""

    def test_widescreen(self):
        assert detect_aspect_bucket(1920, 1080) is AspectBucket.WIDESCREEN

    def test_portrait(self):
        assert detect_aspect_bucket(1080, 1920) is AspectBucket.PORTRAIT

    @pytest.mark.parametrize("width,height", [(0, 0), (None, None), (1920, 0), (0, 1080)])
    def test_missing_dimensions_default(self, width, height):
        assert detect_aspect_bucket(width, height) is AspectBucket.WIDESCREEN

    @pytest.mark.parametrize("width,height,bucket", [
        (2560, 1080, AspectBucket.ULTRA_WIDE),
        (640, 480, AspectBucket.STANDARD),
        (1000, 1000, AspectBucket.SQUARE),
        (900, 1000, AspectBucket.PORTRAIT),
    ])
    def test_thresholds(self, width, height, bucket):
        assert detect_aspect_bucket(width, height) is bucket

    def test_bucket_ratio(self):
        assert AspectBucket.WIDESCREEN.ratio == pytest.approx(16 / 9)
        assert AspectBucket.PORTRAIT.ratio == pytest.approx(9 / 16)


class TestSpeed:
    """Playback speed cycling."""

    def test_wraps_after_two(self):
        assert next_playback_rate(2.0) == 0.5

    def test_steps_by_quarter(self):
        assert next_playback_rate(1.0) == 1.25

    def test_full_cycle(self):
        speed, seen = 0.5, []
        for _ in range(7):
            speed = next_playback_rate(speed)
            seen.append(speed)
        assert seen == [0.75, 1.0, 1.25, 1.5, 1.75, 2.0, 0.5]


class _Emitter(QObject):
    fired = pyqtSignal(int)


class TestListenerSet:
    """Per-video connections are dropped on clear()."""

    def test_clear_detaches_all(self, qapp):
        emitter = _Emitter()
        received = []
        listeners = ListenerSet()
        listeners.bind(emitter.fired, received.append)
        listeners.bind(emitter.fired, lambda v: received.append(v * 10))

        emitter.fired.emit(1)
        assert received == [1, 10]
        assert len(listeners) == 2

        listeners.clear()
        emitter.fired.emit(2)
        assert received == [1, 10]
        assert len(listeners) == 0

    def test_rebind_after_clear(self, qapp):
        emitter = _Emitter()
        old, new = [], []
        listeners = ListenerSet()
        listeners.bind(emitter.fired, old.append)
        listeners.clear()
        listeners.bind(emitter.fired, new.append)

        emitter.fired.emit(3)
        assert old == []
        assert new == [3]

    def test_clear_tolerates_manual_disconnect(self, qapp):
        emitter = _Emitter()
        received = []
        slot = received.append
        listeners = ListenerSet()
        listeners.bind(emitter.fired, slot)
        emitter.fired.disconnect(slot)
        listeners.clear()
        assert len(listeners) == 0
