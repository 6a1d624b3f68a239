"""Shared pytest fixtures for ARISE tests."""

import sys
import pytest

from PyQt6.QtCore import QCoreApplication

from arise.app import AriseCore
from arise.database.db import configure_engine, init_db
from arise.gamification.recovery import RecoveryStorage, RecoveryTracker
from arise.settings import Settings
from arise.timer.engine import SessionTimer

from helpers import FakeClock


@pytest.fixture(scope="session")
def qapp():
    """A single QCoreApplication instance shared across the entire test run."""
    app = QCoreApplication.instance() or QCoreApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db(tmp_path):
    """Point every test at a fresh SQLite file.

    A file rather than ``:memory:`` because the store runs its work in
    worker threads, and each connection to ``:memory:`` is its own database.
    """
    configure_engine(f"sqlite:///{tmp_path / 'arise.db'}")
    init_db()
    yield


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def recovery_storage(tmp_path):
    return RecoveryStorage(tmp_path / "recovery.json")


@pytest.fixture
def tracker(recovery_storage, settings):
    return RecoveryTracker(recovery_storage, settings)


@pytest.fixture
def timer(qapp, settings, clock):
    """Fresh SessionTimer driven by the fake clock."""
    return SessionTimer(parent=None, settings=settings, clock=clock)


@pytest.fixture
def core(qapp, settings, recovery_storage, clock):
    """AriseCore on the test database; call ``await core.startup()`` first."""
    return AriseCore(
        settings=settings, recovery_storage=recovery_storage, clock=clock,
    )
