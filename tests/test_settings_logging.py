import json
import logging

import pytest

from kubbtrainer_core.logging_config import get_logger, log_exception, setup_logging
from kubbtrainer_core.settings import DB_PATH_ENV, TrainerSettings, load_settings, resolve_db_path


def test_packaged_settings_match_defaults():
    assert load_settings() == TrainerSettings()


def test_custom_settings_file_ignores_unknown_keys(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"recent_form_window": 3, "theme": "dark"}), encoding="utf-8")
    settings = load_settings(str(path))
    assert settings.recent_form_window == 3
    assert settings.clutch_min_hits == 3


def test_db_path_env_override(tmp_path, monkeypatch):
    target = tmp_path / "elsewhere.db"
    monkeypatch.setenv(DB_PATH_ENV, str(target))
    assert resolve_db_path() == target
    monkeypatch.delenv(DB_PATH_ENV)
    assert resolve_db_path(tmp_path) == tmp_path / "kubb_trainer.db"


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_setup_logging_writes_rotating_file(tmp_path, restore_root_logger):
    setup_logging(level="DEBUG", log_dir=tmp_path / "logs", enable_console=False, enable_file=True)
    logger = get_logger("kubbtrainer_core.test")
    try:
        raise ValueError("bad input")
    except ValueError as exc:
        log_exception(logger, exc, {"round": 2})
    for handler in restore_root_logger.handlers:
        handler.flush()
    text = (tmp_path / "logs" / "kubb_trainer.log").read_text(encoding="utf-8")
    assert "round=2" in text
    assert "ValueError: bad input" in text


def test_setup_logging_rejects_unknown_level(restore_root_logger):
    with pytest.raises(ValueError):
        setup_logging(level="LOUD")
