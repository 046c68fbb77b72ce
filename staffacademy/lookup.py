# staffacademy/lookup.py

import logging
from typing import Optional, Tuple

import requests

from staffacademy.config import METADATA_LOOKUP_URL, REQUEST_TIMEOUT, YOUTUBE_WATCH_URL

logger = logging.getLogger(__name__)


def fetch_youtube_dimensions(youtube_id: str, timeout: float = REQUEST_TIMEOUT) -> Optional[Tuple[int, int]]:
    """
    Ask the noembed service for a YouTube video's frame size.
    Returns (width, height), or None when the lookup fails for any reason.
    """
    if not youtube_id:
        return None
    watch_url = YOUTUBE_WATCH_URL.format(video_id=youtube_id)
    try:
        resp = requests.get(METADATA_LOOKUP_URL, params={"url": watch_url}, timeout=timeout)
        resp.raise_for_status()
        meta = resp.json()
    except (requests.RequestException, ValueError) as e:
        logger.debug("Metadata lookup failed for %s: %s", watch_url, e)
        return None

    if not isinstance(meta, dict):
        return None
    try:
        width = int(meta.get("width") or 0)
        height = int(meta.get("height") or 0)
    except (TypeError, ValueError):
        return None
    if width <= 0 or height <= 0:
        return None
    return width, height


def fetch_thumbnail(url: str, timeout: float = REQUEST_TIMEOUT) -> Optional[bytes]:
    """Download thumbnail image bytes, or None on failure."""
    if not url:
        return None
    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as e:
        logger.debug("Thumbnail download failed for %s: %s", url, e)
        return None
    return resp.content or None
