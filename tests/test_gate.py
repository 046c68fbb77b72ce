"""
Unit tests for the access gate.
"""

import pytest

from staffacademy.config import ConfigManager
from staffacademy.gate import AccessGate, normalize_key

KEYS = ("AVO-EMP-001-YUVI", "AVO-EMP-002-SRISHTI")


@pytest.fixture
def config(tmp_path):
    cfg = ConfigManager(str(tmp_path))
    cfg.load()
    return cfg


def test_normalize_key():
    assert normalize_key("  avo-emp-001-yuvi \n") == "AVO-EMP-001-YUVI"
    assert normalize_key(None) == ""


def test_locked_by_default(config):
    assert AccessGate(config, KEYS).is_unlocked() is False


def test_valid_key_unlocks_and_persists(config, tmp_path):
    gate = AccessGate(config, KEYS)
    assert gate.unlock("  avo-emp-001-yuvi ") is True
    assert gate.is_unlocked() is True

    reloaded = ConfigManager(str(tmp_path))
    reloaded.load()
    assert reloaded.auth_granted is True
    assert reloaded.key_used == "AVO-EMP-001-YUVI"
    assert AccessGate(reloaded, KEYS).is_unlocked() is True


@pytest.mark.parametrize("code", ["", "   ", "AVO-EMP-999-NOBODY", "AVO-EMP-001"])
def test_invalid_key_rejected(config, code):
    gate = AccessGate(config, KEYS)
    assert gate.unlock(code) is False
    assert gate.is_unlocked() is False
    assert config.key_used == ""


def test_blank_allow_list_entries_ignored(config):
    gate = AccessGate(config, ("", "  ", "KEY-1"))
    assert gate.unlock("") is False
    assert gate.unlock("key-1") is True
