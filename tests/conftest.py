from __future__ import annotations

import io

import pytest
from hypothesis import HealthCheck, settings

from pytnum.logging import LogLevel, TnumLogger, get_logger, set_logger

settings.register_profile(
    "pytnum",
    deadline=None,
    max_examples=200,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.load_profile("pytnum")


@pytest.fixture
def log_stream():
    """Route the global logger into a buffer for the duration of a test."""
    previous = get_logger()
    stream = io.StringIO()
    set_logger(TnumLogger(level=LogLevel.TRACE, color=False, stream=stream, show_time=False))
    yield stream
    set_logger(previous)


@pytest.fixture
def isolated_home(tmp_path, monkeypatch):
    """Working directory and home without any pytnum configuration."""
    home = tmp_path / "home"
    work = tmp_path / "work"
    home.mkdir()
    work.mkdir()
    monkeypatch.setattr("pathlib.Path.home", lambda: home)
    monkeypatch.chdir(work)
    return work
