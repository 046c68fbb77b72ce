# staffacademy/playback.py

import logging
from enum import Enum

logger = logging.getLogger(__name__)

SPEED_STEP = 0.25
MIN_SPEED = 0.5
MAX_SPEED = 2.0


class PlayerState(Enum):
    """Per-video lifecycle; pausing is left to the media backend."""

    IDLE = "idle"
    INITIALIZING = "initializing"
    PLAYING = "playing"


class AspectBucket(Enum):
    """Coarse display ratio used to size the player frame."""

    ULTRA_WIDE = "21:9"
    WIDESCREEN = "16:9"
    STANDARD = "4:3"
    SQUARE = "1:1"
    PORTRAIT = "9:16"

    @property
    def ratio(self) -> float:
        w, h = self.value.split(":")
        return int(w) / int(h)


def detect_aspect_bucket(width, height) -> AspectBucket:
    """
    Classify intrinsic video dimensions.
    Unknown or zero dimensions fall back to widescreen.
    """
    if not width or not height:
        return AspectBucket.WIDESCREEN
    ratio = width / height
    if ratio > 2.2:
        return AspectBucket.ULTRA_WIDE
    if ratio > 1.7:
        return AspectBucket.WIDESCREEN
    if ratio > 1.3:
        return AspectBucket.STANDARD
    if ratio > 0.9:
        return AspectBucket.SQUARE
    return AspectBucket.PORTRAIT


def next_playback_rate(current: float) -> float:
    """Step the speed up by 0.25x, wrapping to 0.5x past 2.0x."""
    nxt = round(current * 100 + SPEED_STEP * 100) / 100
    if nxt > MAX_SPEED:
        nxt = MIN_SPEED
    return nxt


class ListenerSet:
    """
    Tracks the signal connections made for the active video so they can
    all be dropped before the next video attaches its own.
    """

    def __init__(self):
        self._connections = []

    def __len__(self):
        return len(self._connections)

    def bind(self, signal, slot) -> None:
        signal.connect(slot)
        self._connections.append((signal, slot))

    def clear(self) -> None:
        while self._connections:
            signal, slot = self._connections.pop()
            try:
                signal.disconnect(slot)
            except (TypeError, RuntimeError):
                # already disconnected, e.g. the sender was deleted
                logger.debug("Listener %r was already detached", slot)

