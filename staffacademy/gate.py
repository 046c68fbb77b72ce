# staffacademy/gate.py

import logging
from typing import Iterable

from staffacademy.config import ConfigManager

logger = logging.getLogger(__name__)


def normalize_key(code) -> str:
    return str(code or "").strip().upper()


class AccessGate:
    """
    Client-side access prompt in front of the library.

    Compares the entered key against a static allow-list and remembers a
    successful unlock in the config file. This only keeps casual users out;
    anyone with the config file or the source can bypass it.
    """

    def __init__(self, config: ConfigManager, valid_keys: Iterable[str]):
        self.config = config
        self._valid_keys = {normalize_key(k) for k in valid_keys if normalize_key(k)}

    def is_unlocked(self) -> bool:
        return bool(self.config.auth_granted)

    def unlock(self, code: str) -> bool:
        """Check `code`; on a match persist the unlock and return True."""
        key = normalize_key(code)
        if not key or key not in self._valid_keys:
            logger.info("Rejected access key attempt")
            return False

        self.config.auth_granted = True
        self.config.key_used = key
        self.config.save()
        logger.info("Access granted with key %s", key)
        return True
