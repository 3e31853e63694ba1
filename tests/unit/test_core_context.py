import pytest

from src.core.context import CoreContext
from src.core.database import DatabaseManager
from src.core.dto.video import VideoRecord
from src.utils.file_utils import normalize_library_path


def test_config_defaults(config_db) -> None:
    config = config_db.get_all_config()
    assert config["library_db_path"] == ""
    assert config["selection_poll_interval_ms"] == "500"
    assert config["log_level_bridge"] == "WARNING"
    assert config["log_level_session"] == "INFO"


def test_defaults_do_not_overwrite_saved_values(tmp_path) -> None:
    path = tmp_path / "data.db"
    db = DatabaseManager(path)
    db.connect()
    db.set_config("home_url", "https://example.org/")
    db.close()

    db = DatabaseManager(path)
    db.connect()
    assert db.get_config("home_url") == "https://example.org/"
    db.close()


def test_get_int_config_falls_back_on_garbage(config_db) -> None:
    config_db.set_config("selection_poll_interval_ms", "soon")
    assert config_db.get_int_config("selection_poll_interval_ms", 500) == 500
    assert config_db.get_int_config("missing_key", 7) == 7


def test_context_starts_unconfigured(config_db) -> None:
    core = CoreContext(db=config_db)
    assert not core.store.is_configured
    assert core.poll_interval == 0.5
    assert core.bridge_timeout == 5.0
    assert core.resolver.list_playlists() == []


@pytest.mark.asyncio
async def test_set_library_path_opens_and_persists(config_db, tmp_path, decisions) -> None:
    core = CoreContext(db=config_db)
    library = tmp_path / "lib" / "shelf.db"

    assert core.set_library_path(library)
    assert config_db.get_config("library_db_path") == str(library)

    result = await core.resolver.save_video(VideoRecord(url="https://site/v/1"), decisions)
    assert result.success
    core.store.close()

    reopened = CoreContext(db=config_db)
    assert reopened.store.is_configured
    assert reopened.store.find_video_by_url("https://site/v/1") is not None
    reopened.store.close()


def test_set_library_path_failure_keeps_old_setting(config_db, tmp_path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("x")
    core = CoreContext(db=config_db)

    assert not core.set_library_path(blocker / "shelf.db")
    assert config_db.get_config("library_db_path") == ""
    assert not core.store.is_configured


def test_normalize_library_path(tmp_path) -> None:
    assert normalize_library_path(str(tmp_path / "shelf")) == (tmp_path / "shelf.db").resolve()
    assert normalize_library_path(f"file://{tmp_path}/x.db") == (tmp_path / "x.db").resolve()
    with pytest.raises(ValueError):
        normalize_library_path("   ")
