# staffacademy/fetcher.py

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlparse

import requests

from staffacademy.config import REQUEST_TIMEOUT
from staffacademy.utils import extract_youtube_id, parse_timestamp, stable_fallback_id

logger = logging.getLogger(__name__)

VIDEO_TYPE_YOUTUBE = "youtube"
VIDEO_TYPE_EXTERNAL = "external"
VIDEO_TYPES = (VIDEO_TYPE_YOUTUBE, VIDEO_TYPE_EXTERNAL)

DEFAULT_TITLE = "Untitled"
DEFAULT_CATEGORY = "General"


class CatalogError(Exception):
    """The manifest could not be fetched or decoded."""


@dataclass
class VideoItem:
    """
    Represents a single training video from the manifest.

    Attributes:
        id (str): Stable id used to key watch progress.
        title (str): Display title.
        description (str): Free-text description, may be empty.
        video_type (str): 'youtube' or 'external'.
        url (str): Source location.
        category (str): Grouping label.
        uploaded_at (datetime): Upload time, only used for ordering.
    """
    id: str
    title: str
    description: str
    video_type: str
    url: str
    category: str
    uploaded_at: datetime

    @property
    def is_youtube(self) -> bool:
        return self.video_type == VIDEO_TYPE_YOUTUBE

    @property
    def youtube_id(self) -> Optional[str]:
        return extract_youtube_id(self.url) if self.is_youtube else None


def normalize_entry(raw: dict, loaded_at: datetime) -> VideoItem:
    """
    Fill in the fields a manifest entry may omit.

    Entries without an id get one derived from their URL, so progress for
    them still lines up after the manifest is reloaded.
    """
    url = raw.get("url")
    raw_type = raw.get("type")
    if raw_type not in VIDEO_TYPES:
        raw_type = None
    video_type = raw_type or (VIDEO_TYPE_YOUTUBE if extract_youtube_id(url) else VIDEO_TYPE_EXTERNAL)

    video_id = raw.get("id")
    if video_id is None or video_id == "":
        video_id = stable_fallback_id(raw_type or "ext", str(url))

    return VideoItem(
        id=str(video_id),
        title=str(raw.get("title") or DEFAULT_TITLE),
        description=str(raw.get("description") or ""),
        video_type=video_type,
        url=url,
        category=str(raw.get("category") or DEFAULT_CATEGORY),
        uploaded_at=parse_timestamp(raw.get("uploadedAt"), loaded_at),
    )


def normalize_catalog(entries, loaded_at: datetime = None) -> list[VideoItem]:
    """
    Normalize raw manifest entries and sort them newest first.
    Ties keep their manifest order.
    """
    loaded_at = loaded_at or datetime.now(timezone.utc)
    items: list[VideoItem] = []
    for i, raw in enumerate(entries or [], start=1):
        if not isinstance(raw, dict):
            logger.warning("Skipping manifest entry %d: not an object", i)
            continue
        url = raw.get("url")
        if not isinstance(url, str) or not url.strip():
            logger.warning("Skipping manifest entry %d: missing or invalid url", i)
            continue
        items.append(normalize_entry(raw, loaded_at))

    # sorted() is stable, reverse=True included
    return sorted(items, key=lambda v: v.uploaded_at, reverse=True)


def read_manifest(source: str, timeout: float = REQUEST_TIMEOUT) -> list:
    """
    Load the raw manifest array from an http(s) URL or a local file.
    Raises CatalogError on any failure.
    """
    scheme = urlparse(source).scheme.lower()
    try:
        if scheme in ("http", "https"):
            resp = requests.get(source, timeout=timeout)
            resp.raise_for_status()
            data = resp.json()
        else:
            with open(source, "r", encoding="utf-8") as f:
                data = json.load(f)
    except (requests.RequestException, OSError, ValueError) as e:
        raise CatalogError(f"Failed to load {source}: {e}") from e

    if not isinstance(data, list):
        raise CatalogError(f"Manifest {source} is not a JSON array")
    return data


class CatalogFetcher:
    """
    Fetches and normalizes the video manifest once.
    On failure the error is logged and an empty catalog is returned.
    """

    def __init__(self, timeout: float = REQUEST_TIMEOUT):
        self.timeout = timeout

    def fetch_catalog(self, source: str) -> list[VideoItem]:
        logger.info("Loading video manifest from %s", source)
        try:
            entries = read_manifest(source, self.timeout)
        except CatalogError as e:
            logger.error("%s", e)
            return []

        items = normalize_catalog(entries)
        logger.info("Loaded %d videos (%d manifest entries)", len(items), len(entries))
        return items
