"""Shared pytest fixtures for PomoTimer tests."""

import os
import sys
import tempfile

# Headless Qt and a throwaway app-support dir, before pomotimer is imported
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
os.environ.setdefault("POMOTIMER_HOME", tempfile.mkdtemp(prefix="pomotimer-tests-"))

import pytest

from PyQt6.QtWidgets import QApplication

from pomotimer.settings import Settings, MemorySettingsStore
from pomotimer.timer.engine import TimerEngine

from helpers import RecordingSignaler


@pytest.fixture(scope="session")
def qapp():
    """A single QApplication instance shared across the entire test run."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture
def store():
    """In-memory settings store (nothing saved yet)."""
    return MemorySettingsStore()


@pytest.fixture
def signaler():
    return RecordingSignaler()


@pytest.fixture
def engine(qapp, store, signaler):
    """Fresh TimerEngine on default settings."""
    return TimerEngine(parent=None, settings=Settings(), store=store, signaler=signaler)


@pytest.fixture
def short_engine(qapp, store, signaler):
    """Engine with one-minute durations and a cadence of 3."""
    settings = Settings(
        work_duration=60,
        short_break_duration=60,
        long_break_duration=120,
        sessions_before_long_break=3,
    )
    return TimerEngine(parent=None, settings=settings, store=store, signaler=signaler)
