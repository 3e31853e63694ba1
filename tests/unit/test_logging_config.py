import logging

from src.utils.logging_config import (
    DEFAULT_LOG_LEVELS,
    LoggerCategory,
    LoggingManager,
)


def test_defaults_without_database(tmp_path) -> None:
    manager = LoggingManager(log_dir=tmp_path)
    assert manager.get_all_levels() == DEFAULT_LOG_LEVELS
    assert manager.get_category_level("unknown") == logging.INFO


def test_level_change_is_persisted_and_applied(tmp_path, config_db) -> None:
    manager = LoggingManager(log_dir=tmp_path, db_manager=config_db)
    manager.set_category_level(LoggerCategory.BRIDGE, logging.DEBUG)

    assert config_db.get_config("log_level_bridge") == "DEBUG"
    assert logging.getLogger("src.ui.browser.web_bridge").level == logging.DEBUG

    reloaded = LoggingManager(log_dir=tmp_path, db_manager=config_db)
    assert reloaded.get_category_level(LoggerCategory.BRIDGE) == logging.DEBUG

    manager.set_category_level(LoggerCategory.BRIDGE, DEFAULT_LOG_LEVELS[LoggerCategory.BRIDGE])


def test_bad_persisted_level_falls_back(tmp_path, config_db) -> None:
    config_db.set_config("log_level_session", "chatty")
    manager = LoggingManager(log_dir=tmp_path)
    manager.attach_database(config_db)
    assert manager.get_category_level(LoggerCategory.SESSION) == logging.INFO
