import logging

from expense_tracker.config import Settings, get_settings
from expense_tracker.log import setup_logging


def test_defaults():
    s = Settings(_env_file=None)
    assert s.seed_path == "data/seed.json"
    assert s.top_categories_limit == 5
    assert s.recent_activity_limit == 5


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("EXPENSE_TRACKER_SEED_PATH", "/tmp/other.json")
    monkeypatch.setenv("EXPENSE_TRACKER_TOP_CATEGORIES_LIMIT", "3")
    s = Settings(_env_file=None)
    assert s.seed_path == "/tmp/other.json"
    assert s.top_categories_limit == 3


def test_get_settings_is_shared():
    assert get_settings() is get_settings()


def test_setup_logging_sets_level():
    root = logging.getLogger()
    previous = root.level
    try:
        setup_logging("debug")
        assert root.level == logging.DEBUG
        assert root.handlers
    finally:
        root.setLevel(previous)
