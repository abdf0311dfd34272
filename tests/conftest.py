"""
Pytest configuration and shared fixtures for cellwidgets tests.

This module provides common fixtures and utilities used across all test modules.
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest


# Mock hardware dependencies before other imports
# This allows tests to run on non-Raspberry Pi systems
sys.modules["RPi"] = MagicMock()
sys.modules["RPi.GPIO"] = sys.modules["RPi"].GPIO

from cellwidgets.app import Application  # noqa: E402
from cellwidgets.config import settings  # noqa: E402
from cellwidgets.domain.events import InputEvent  # noqa: E402
from cellwidgets.domain.session import SessionInfo  # noqa: E402
from cellwidgets.menu import Menu  # noqa: E402
from cellwidgets.ui.screen import Screen  # noqa: E402
from cellwidgets.ui.theme import ColorTheme  # noqa: E402


# ==============================================================================
# Settings Fixtures
# ==============================================================================


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Keep every test away from the user's real settings file."""
    monkeypatch.setattr(
        "cellwidgets.config.settings.SETTINGS_PATH", tmp_path / "settings.json"
    )
    settings.settings_store.values = dict(settings.DEFAULT_SETTINGS)
    yield
    settings.settings_store.values = dict(settings.DEFAULT_SETTINGS)


@pytest.fixture
def temp_settings_file(tmp_path) -> Path:
    """
    Fixture providing a temporary settings file path.

    Args:
        tmp_path: pytest's built-in temporary directory fixture.

    Returns:
        Path to a temporary settings file.
    """
    settings_dir = tmp_path / ".config" / "cellwidgets"
    settings_dir.mkdir(parents=True, exist_ok=True)
    return settings_dir / "settings.json"


@pytest.fixture
def sample_settings_data() -> Dict[str, Any]:
    """
    Fixture providing sample settings data.

    Returns:
        Dict with typical settings values.
    """
    return {
        "poll_timeout": 0.2,
        "mouse_enabled": False,
        "web_port": 9000,
        "theme": {"menu": "black on cyan"},
    }


# ==============================================================================
# Backend Fixtures
# ==============================================================================


class FakeBackend:
    """In-memory backend: events are scripted, flushes are recorded."""

    def __init__(self, width: int = 80, height: int = 24) -> None:
        self._screen = Screen(width, height)
        self._session_info = SessionInfo(
            username="tester", window_width=width, window_height=height
        )
        self.pending: List[InputEvent] = []
        self.flushes: List[List[tuple]] = []
        self.shutdown_calls = 0
        self.fail_with: Optional[Exception] = None
        self._closed = False

    @property
    def screen(self) -> Screen:
        return self._screen

    @property
    def session_info(self) -> SessionInfo:
        return self._session_info

    @property
    def closed(self) -> bool:
        return self._closed

    def feed(self, *events: InputEvent) -> None:
        self.pending.extend(events)

    def flush_screen(self) -> None:
        self.flushes.append(list(self._screen.dirty_cells()))
        self._screen.mark_flushed()

    def get_events(self, queue: List[InputEvent]) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        queue.extend(self.pending)
        self.pending.clear()

    def shutdown(self) -> None:
        self.shutdown_calls += 1
        self._closed = True


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def theme() -> ColorTheme:
    return ColorTheme()


@pytest.fixture
def app(fake_backend, theme) -> Application:
    return Application(fake_backend, theme=theme)


@pytest.fixture
def menu(app) -> Menu:
    """An empty menu attached to the application at (0, 0)."""
    menu = Menu(title="&Test")
    menu.set_application(app)
    return menu


@pytest.fixture
def posted_events(app) -> List:
    """Menu events posted to the application, in order."""
    received: List = []
    post = app.post_menu_event

    def record(event):
        received.append(event)
        post(event)

    app.post_menu_event = record
    return received
