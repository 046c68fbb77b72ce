# staffacademy/config.py

import os
import json
import logging
from typing import Tuple

from .utils import get_app_dir, ensure_directory

logger = logging.getLogger(__name__)

APP_NAME = "StaffAcademy"

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# http(s) URL or local path of the video manifest
MANIFEST_SOURCE: str = os.getenv("STAFFACADEMY_MANIFEST", "videos.json").strip() or "videos.json"
REQUEST_TIMEOUT: float = float(os.getenv("STAFFACADEMY_REQUEST_TIMEOUT", "30"))

CONFIG_FILENAME = "config.json"
PROGRESS_FILENAME = "progress.json"

YOUTUBE_EMBED_URL = "https://www.youtube.com/embed/{video_id}?modestbranding=1&rel=0"
YOUTUBE_WATCH_URL = "https://www.youtube.com/watch?v={video_id}"
METADATA_LOOKUP_URL = "https://noembed.com/embed"

# Add each employee's access key here; delete a key to revoke it.
DEFAULT_ACCESS_KEYS: Tuple[str, ...] = (
    "AVO-EMP-001-YUVI",
    "AVO-EMP-002-SRISHTI",
    "AVO-EMP-003-PRIYA",
    "AVO-EMP-004-SURAJ",
    "AVO-EMP-005-ANITA",
)


def load_access_keys() -> Tuple[str, ...]:
    """Return the gate allow-list, honouring STAFFACADEMY_ACCESS_KEYS."""
    raw = os.getenv("STAFFACADEMY_ACCESS_KEYS", "")
    keys = tuple(k.strip() for k in raw.split(",") if k.strip())
    return keys or DEFAULT_ACCESS_KEYS


class ConfigManager:
    """
    Handles loading and saving user preferences (manifest location, gate
    unlock state, sidebar layout) to a JSON config file in the user's
    config folder. The progress file lives in the same folder.
    """
    def __init__(self, config_dir: str = None):
        # sensible defaults
        self.manifest_source = MANIFEST_SOURCE
        self.auth_granted = False
        self.key_used = ""
        self.sidebar_collapsed = False

        self.config_dir = config_dir or get_app_dir(APP_NAME)
        ensure_directory(self.config_dir)
        self._config_path = os.path.join(self.config_dir, CONFIG_FILENAME)

    @property
    def config_path(self) -> str:
        return self._config_path

    @property
    def progress_path(self) -> str:
        return os.path.join(self.config_dir, PROGRESS_FILENAME)

    def load(self) -> None:
        """
        Load config from disk, if it exists. Otherwise keep defaults.
        """
        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            # no config yet, first run
            return
        except (OSError, ValueError) as e:
            logger.warning("Error loading config %s: %s", self._config_path, e)
            return

        if not isinstance(data, dict):
            logger.warning("Ignoring malformed config %s", self._config_path)
            return

        self.manifest_source   = data.get("manifest_source",   self.manifest_source) or MANIFEST_SOURCE
        self.auth_granted      = data.get("auth") == "granted"
        self.key_used          = data.get("key_used",          self.key_used) or ""
        self.sidebar_collapsed = bool(data.get("sidebar_collapsed", self.sidebar_collapsed))

    def save(self) -> None:
        """
        Write current settings to the config file.
        """
        data = {
            "manifest_source":   self.manifest_source,
            "auth":              "granted" if self.auth_granted else "",
            "key_used":          self.key_used,
            "sidebar_collapsed": self.sidebar_collapsed,
        }
        try:
            with open(self._config_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        except (OSError, TypeError, ValueError) as e:
            logger.warning("Error saving config %s: %s", self._config_path, e)
