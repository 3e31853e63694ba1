from datetime import datetime, timezone

import pytest

from src.core.dto.image import ImageKey, ImageRecord
from src.core.dto.library import UpsertMode
from src.core.dto.video import VideoRecord
from src.core.errors import ConstraintViolationError, StoreNotConfiguredError
from src.core.record_store import RecordStore

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)
T1 = datetime(2024, 2, 1, tzinfo=timezone.utc)


def _video(url="https://site/v/42", **fields) -> VideoRecord:
    return VideoRecord(url=url, created_at=T0, updated_at=T0, **fields)


def _images(urls, source="https://site/browse/images", tag="beach"):
    return [ImageRecord(url=u, source_url=source, tag=tag, saved_at=T0, created_at=T0) for u in urls]


def test_unconfigured_store_raises(unconfigured_store) -> None:
    assert not unconfigured_store.connect()
    assert not unconfigured_store.is_configured
    with pytest.raises(StoreNotConfiguredError):
        unconfigured_store.find_video_by_url("x")
    with pytest.raises(StoreNotConfiguredError):
        unconfigured_store.list_playlists()


def test_video_roundtrip_keeps_tags_order(store) -> None:
    store.upsert_video(_video(title="Old", views=0, tags=("b", "a", "b")), UpsertMode.INSERT)
    found = store.find_video_by_url("https://site/v/42")
    assert found.title == "Old"
    assert found.views == 0
    assert found.tags == ("b", "a", "b")
    assert found.created_at == T0


def test_insert_collision_raises_constraint_violation(store) -> None:
    store.upsert_video(_video(title="Old"), UpsertMode.INSERT)
    with pytest.raises(ConstraintViolationError):
        store.upsert_video(_video(title="New"), UpsertMode.INSERT)


def test_update_keeps_created_at(store) -> None:
    store.upsert_video(_video(title="Old"), UpsertMode.INSERT)
    result = store.upsert_video(
        VideoRecord(url="https://site/v/42", title="New", created_at=T1, updated_at=T1),
        UpsertMode.UPDATE,
    )
    assert result.rows_affected == 1
    found = store.find_video_by_url("https://site/v/42")
    assert found.title == "New"
    assert found.created_at == T0
    assert found.updated_at == T1


def test_list_playlists_distinct_sorted_non_empty(store) -> None:
    for i, playlist in enumerate(["beta", "Alpha", "beta", "", None, "  "]):
        store.upsert_video(_video(url=f"https://site/v/{i}", playlist=playlist), UpsertMode.INSERT)
    assert store.list_playlists() == ["Alpha", "beta"]


def test_insert_images_is_idempotent(store) -> None:
    records = _images(["a.jpg", "b.jpg", "c.jpg"])
    first = store.insert_images_ignoring_duplicates(records)
    second = store.insert_images_ignoring_duplicates(records)

    assert (first.saved, first.skipped) == (3, 0)
    assert (second.saved, second.skipped) == (0, 3)
    assert store.get_stats().total_images == 3


def test_same_image_under_other_tag_is_distinct(store) -> None:
    store.insert_images_ignoring_duplicates(_images(["a.jpg"], tag="beach"))
    summary = store.insert_images_ignoring_duplicates(_images(["a.jpg"], tag="sunset"))
    assert summary.saved == 1


def test_row_failure_is_skipped_and_batch_continues(store) -> None:
    records = _images(["a.jpg"]) + [
        ImageRecord(url=object(), source_url="https://site/browse/images", tag="beach"),
    ] + _images(["b.jpg"])
    summary = store.insert_images_ignoring_duplicates(records)

    assert summary.saved == 2
    assert summary.skipped == 1
    assert len(summary.failed_urls) == 1


def test_find_images_by_keys_groups_and_chunks(store) -> None:
    urls = [f"img{i}.jpg" for i in range(1200)]
    store.insert_images_ignoring_duplicates(_images(urls))
    store.insert_images_ignoring_duplicates(_images(["img0.jpg"], tag="other"))

    keys = [ImageKey(u, "https://site/browse/images", "beach") for u in urls[::2]]
    keys.append(ImageKey("img0.jpg", "https://site/browse/images", "other"))
    keys.append(ImageKey("missing.jpg", "https://site/browse/images", "beach"))

    found = store.find_images_by_keys(keys)
    assert len(found) == 601
    assert {r.key for r in found} <= set(keys)


def test_get_stats_counts(store) -> None:
    store.upsert_video(_video(playlist="p1"), UpsertMode.INSERT)
    store.insert_images_ignoring_duplicates(_images(["a.jpg", "b.jpg"]))
    stats = store.get_stats()
    assert stats.total_videos == 1
    assert stats.total_images == 2
    assert stats.total_playlists == 1
    assert stats.db_size > 0


def test_connect_failure_stays_unconfigured(tmp_path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("x")
    record_store = RecordStore(blocker / "library.db")
    assert not record_store.connect()
    assert not record_store.is_configured
