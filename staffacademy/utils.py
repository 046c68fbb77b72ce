# staffacademy/utils.py

import os
import math
import time
import hashlib
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse, parse_qs

logger = logging.getLogger(__name__)

YOUTUBE_HOSTS = ("youtube.com", "youtube-nocookie.com")
YOUTUBE_SHORT_HOSTS = ("youtu.be",)


def setup_logging(
    level: str = "INFO",
    format_string: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
) -> logging.Logger:
    """Configure root logging once and return module logger."""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root_logger.setLevel(numeric_level)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(format_string))
    root_logger.addHandler(console_handler)
    return logging.getLogger(__name__)


def ensure_directory(path: str) -> None:
    """
    Create the directory (and parents) if it doesn't already exist.
    Uses pathlib for cross-platform reliability.
    """
    try:
        Path(path).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        # callers fall back to defaults when the directory is unusable
        logger.warning("Error creating directory %s: %s", path, e)


def get_app_dir(app_name: str) -> str:
    """
    Return the per-user directory holding config and progress files:
    %APPDATA%/<app_name> on Windows, ~/.config/<app_name> elsewhere.
    STAFFACADEMY_HOME overrides both.
    """
    override = os.getenv("STAFFACADEMY_HOME", "").strip()
    if override:
        return override
    home = os.path.expanduser("~")
    if os.name == "nt":
        root = os.getenv("APPDATA", home)
    else:
        root = os.path.join(home, ".config")
    return os.path.join(root, app_name)


def extract_youtube_id(url) -> Optional[str]:
    """
    Pull the video id out of a YouTube link.

    Handles watch URLs (?v=), youtu.be short links and /embed/ or /shorts/
    paths. Returns None for anything else, including malformed URLs.
    """
    if not isinstance(url, str) or not url:
        return None
    try:
        parsed = urlparse(url.strip())
        host = (parsed.hostname or "").lower()
    except ValueError:
        return None

    if any(host == h or host.endswith("." + h) for h in YOUTUBE_SHORT_HOSTS):
        video_id = parsed.path.lstrip("/").split("/")[0]
        return video_id or None

    if any(host == h or host.endswith("." + h) for h in YOUTUBE_HOSTS):
        video_id = parse_qs(parsed.query).get("v", [None])[0]
        if video_id:
            return video_id
        parts = [p for p in parsed.path.split("/") if p]
        if len(parts) >= 2 and parts[0] in ("embed", "shorts", "live"):
            return parts[1]
    return None


def youtube_thumbnail_url(video_id: Optional[str]) -> Optional[str]:
    if not video_id:
        return None
    return f"https://img.youtube.com/vi/{video_id}/hqdefault.jpg"


def stable_fallback_id(prefix: str, url: str) -> str:
    """Derive an id from the URL so it survives manifest reloads."""
    digest = hashlib.sha1(url.encode("utf-8")).hexdigest()
    return f"{prefix}-{digest[:7]}"


def parse_timestamp(value, default: datetime) -> datetime:
    """
    Parse an upload timestamp from the manifest.

    Accepts ISO-8601 strings (trailing 'Z' allowed) and numbers as epoch
    seconds, or epoch milliseconds when larger than 1e11. Naive values are
    taken as UTC. Anything else yields `default`.
    """
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, (int, float)):
        seconds = value / 1000.0 if abs(value) > 1e11 else float(value)
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return default
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            logger.debug("Unparseable uploadedAt %r, using load time", value)
            return default
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    return default


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def percent_watched(played_seconds, duration) -> int:
    """Rounded watch percentage; an unknown duration counts as 1 second."""
    try:
        played = float(played_seconds or 0)
        total = float(duration or 1)
        if not (math.isfinite(played) and math.isfinite(total)):
            return 0
        return round(played / max(total, 1) * 100)
    except (TypeError, ValueError, OverflowError):
        return 0


def format_duration(seconds) -> str:
    """
    Format a duration in seconds into H:MM:SS.
    """
    try:
        return str(timedelta(seconds=int(seconds or 0)))
    except (TypeError, ValueError, OverflowError):
        return "0:00:00"
