"""Pytest fixtures for the StaffAcademy tests."""

import os
from datetime import datetime, timezone

import pytest
from PyQt6.QtCore import QCoreApplication, Qt
from PyQt6.QtWidgets import QApplication

from staffacademy.fetcher import normalize_catalog


# headless widgets, including the embedded web view
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
os.environ.setdefault("QTWEBENGINE_DISABLE_SANDBOX", "1")


@pytest.fixture(scope="session")
def qapp():
    """One QApplication for tests that use Qt signals or widgets."""
    app = QApplication.instance()
    if app is None:
        QCoreApplication.setAttribute(Qt.ApplicationAttribute.AA_ShareOpenGLContexts)
        app = QApplication([])
    yield app


@pytest.fixture
def loaded_at():
    return datetime(2024, 6, 1, tzinfo=timezone.utc)


@pytest.fixture
def raw_entries():
    """Manifest entries in the shape served by videos.json."""
    return [
        {
            "id": "fire-101",
            "title": "Fire Safety",
            "description": "Extinguishers and evacuation routes",
            "type": "external",
            "url": "https://cdn.example.com/fire-safety.mp4",
            "category": "Safety",
            "uploadedAt": "2021-03-01T09:00:00Z",
        },
        {
            "id": "onboard-1",
            "title": "Onboarding",
            "description": "Your first week at the company",
            "url": "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            "category": "HR",
            "uploadedAt": "2022-01-15T09:00:00Z",
        },
        {
            "id": "lift-2",
            "title": "Lifting Technique",
            "description": "Protect your back",
            "url": "https://youtu.be/abc123XYZ",
            "category": "Safety",
            "uploadedAt": "2020-07-20T09:00:00Z",
        },
        {
            "title": "Expense Reports",
            "url": "https://cdn.example.com/expenses.mp4",
        },
    ]


@pytest.fixture
def catalog(raw_entries, loaded_at):
    """Normalized catalog built from raw_entries."""
    return normalize_catalog(raw_entries, loaded_at)
