import pytest

from src.core.dto.image import ImageBatch, ImageDetails
from src.core.dto.library import UpsertMode
from src.core.dto.resolution import (
    FieldSource,
    MergeField,
    ResolutionDecision,
    ResolutionKind,
    SaveAction,
)
from src.core.dto.video import VideoRecord
from src.core.duplicate_resolver import DuplicateResolver, merge_video
from src.core.errors import ConstraintViolationError, ErrorKind

PAGE = "https://site/browse/images"


def _batch(urls, tag="beach", source=PAGE) -> ImageBatch:
    return ImageBatch(urls=tuple(urls), source_url=source, tag=tag)


def _count_videos(store) -> int:
    return store.get_stats().total_videos


# ----------------------------------------------------------------------
# Videos
# ----------------------------------------------------------------------

@pytest.mark.asyncio
async def test_new_video_is_inserted(resolver, decisions, store) -> None:
    result = await resolver.save_video(VideoRecord(url="https://site/v/1?ref=x", title="T"), decisions)

    assert result.action == SaveAction.INSERTED
    assert result.record.url == "https://site/v/1"
    assert result.record.created_at == result.record.updated_at
    assert decisions.asked == []
    assert store.find_video_by_url("https://site/v/1").title == "T"


@pytest.mark.asyncio
async def test_overwrite_scenario(resolver, decisions, store) -> None:
    await resolver.save_video(VideoRecord(url="site/v/42", title="Old"), decisions)
    decisions.video_decisions.append(ResolutionDecision.overwrite())

    result = await resolver.save_video(VideoRecord(url="site/v/42?ref=home", title="New"), decisions)

    assert result.action == SaveAction.UPDATED
    stored = store.find_video_by_url("site/v/42")
    assert stored.title == "New"
    assert _count_videos(store) == 1


@pytest.mark.asyncio
async def test_overwrite_keeps_created_at_and_advances_updated_at(resolver, decisions, store) -> None:
    first = await resolver.save_video(VideoRecord(url="site/v/1", title="Old"), decisions)
    decisions.video_decisions.append(ResolutionDecision.overwrite())
    await resolver.save_video(VideoRecord(url="site/v/1", title="New"), decisions)

    stored = store.find_video_by_url("site/v/1")
    assert stored.created_at == first.record.created_at
    assert stored.updated_at > first.record.updated_at


@pytest.mark.asyncio
async def test_keep_existing_writes_nothing(resolver, decisions, store) -> None:
    await resolver.save_video(VideoRecord(url="site/v/1", title="Old"), decisions)
    before = store.find_video_by_url("site/v/1")
    decisions.video_decisions.append(ResolutionDecision.keep_existing())

    result = await resolver.save_video(VideoRecord(url="site/v/1", title="New"), decisions)

    assert result.action == SaveAction.KEPT_EXISTING
    assert store.find_video_by_url("site/v/1") == before


@pytest.mark.asyncio
async def test_cancel_writes_nothing(resolver, decisions, store) -> None:
    await resolver.save_video(VideoRecord(url="site/v/1", title="Old"), decisions)
    decisions.video_decisions.append(ResolutionDecision.cancel())

    result = await resolver.save_video(VideoRecord(url="site/v/1", title="New"), decisions)

    assert result.action == SaveAction.CANCELLED
    assert store.find_video_by_url("site/v/1").title == "Old"


@pytest.mark.asyncio
async def test_field_merge_all_existing_keeps_old_values(resolver, decisions, store) -> None:
    old = VideoRecord(url="site/v/1", title="Old", views=10, playlist="P", plot="old plot", brand="B")
    await resolver.save_video(old, decisions)
    before = store.find_video_by_url("site/v/1")
    decisions.video_decisions.append(
        ResolutionDecision.field_merge({f: FieldSource.EXISTING for f in MergeField})
    )

    new = VideoRecord(url="site/v/1", title="New", views=99, playlist="Q", plot="new plot", brand="B")
    result = await resolver.save_video(new, decisions)

    after = store.find_video_by_url("site/v/1")
    assert result.action == SaveAction.UPDATED
    assert after.content_fields() == before.content_fields()
    assert after.created_at == before.created_at
    assert after.updated_at > before.updated_at


@pytest.mark.asyncio
async def test_image_kind_for_video_raises(resolver, decisions) -> None:
    await resolver.save_video(VideoRecord(url="site/v/1"), decisions)
    decisions.video_decisions.append(ResolutionDecision.save_all())
    with pytest.raises(ValueError):
        await resolver.save_video(VideoRecord(url="site/v/1"), decisions)


@pytest.mark.asyncio
async def test_empty_url_is_invalid(resolver, decisions, store) -> None:
    result = await resolver.save_video(VideoRecord(url="?only=query"), decisions)
    assert result.action == SaveAction.NOT_SAVED
    assert result.error == ErrorKind.INVALID_RECORD
    assert _count_videos(store) == 0


@pytest.mark.asyncio
async def test_unconfigured_store_reports_not_configured(unconfigured_store, decisions) -> None:
    resolver = DuplicateResolver(unconfigured_store)
    result = await resolver.save_video(VideoRecord(url="site/v/1"), decisions)
    assert result.error == ErrorKind.NOT_CONFIGURED
    assert not result.success
    assert resolver.list_playlists() == []
    assert resolver.get_stats().total_videos == 0


@pytest.mark.asyncio
async def test_stale_lookup_insert_is_retried_as_update(store, clock, decisions) -> None:
    class StaleStore(type(store)):
        def find_video_by_url(self, url):
            # First lookup misses even though the row exists
            if not getattr(self, "_missed", False):
                self._missed = True
                return None
            return super().find_video_by_url(url)

    stale = StaleStore(store.db_path)
    assert stale.connect()
    stale.upsert_video(VideoRecord(url="site/v/1", title="Old"), UpsertMode.INSERT)

    resolver = DuplicateResolver(stale, clock=clock)
    result = await resolver.save_video(VideoRecord(url="site/v/1", title="New"), decisions)

    assert result.action == SaveAction.UPDATED
    assert stale.find_video_by_url("site/v/1").title == "New"
    assert _count_videos(stale) == 1
    stale.close()


@pytest.mark.asyncio
async def test_repeated_saves_leave_one_row(resolver, decisions, store) -> None:
    decisions.video_decisions.extend([
        ResolutionDecision.overwrite(),
        ResolutionDecision.keep_existing(),
        ResolutionDecision.field_merge({"title": "existing"}),
    ])
    for variant in ("site/v/7", "SITE/v/7?a=1", "site/V/7#x", "site/v/7?b"):
        await resolver.save_video(VideoRecord(url=variant, title=variant), decisions)
    assert _count_videos(store) == 1


def test_merge_video_defaults_unselected_to_candidate() -> None:
    existing = VideoRecord(url="u", title="Old", views=1, playlist="P", plot="x", brand="OldBrand")
    candidate = VideoRecord(url="u", title="New", views=2, playlist="Q", plot="y", brand="NewBrand")

    merged = merge_video(existing, candidate, ResolutionDecision.field_merge({"views": "existing"}))

    assert merged.views == 1
    assert merged.title == "New"
    assert merged.playlist == "Q"
    assert merged.brand == "NewBrand"


def test_constraint_violation_kind() -> None:
    assert ConstraintViolationError("x").kind == ErrorKind.CONSTRAINT_VIOLATION


# ----------------------------------------------------------------------
# Images
# ----------------------------------------------------------------------

@pytest.mark.asyncio
async def test_new_images_then_save_all_again(resolver, decisions) -> None:
    urls = ["a.jpg", "b.jpg", "c.jpg"]
    first = await resolver.save_images(_batch(urls), decisions)
    assert (first.saved, first.skipped) == (3, 0)
    assert decisions.asked == []

    decisions.image_decisions.append(ResolutionDecision.save_all())
    second = await resolver.save_images(_batch(urls), decisions)
    assert (second.saved, second.skipped) == (0, 3)
    assert second.protocol == ResolutionKind.SAVE_ALL


@pytest.mark.asyncio
async def test_save_new_only_counts(resolver, decisions, store) -> None:
    await resolver.save_images(_batch(["a.jpg", "b.jpg"]), decisions)
    decisions.image_decisions.append(ResolutionDecision.save_new_only())

    result = await resolver.save_images(_batch(["a.jpg", "b.jpg", "c.jpg", "d.jpg", "e.jpg"]), decisions)

    assert (result.saved, result.skipped) == (3, 2)
    assert len(decisions.seen_duplicates[0]) == 2
    assert store.get_stats().total_images == 5


@pytest.mark.asyncio
async def test_image_cancel_writes_nothing(resolver, decisions, store) -> None:
    await resolver.save_images(_batch(["a.jpg"]), decisions)
    decisions.image_decisions.append(ResolutionDecision.cancel())

    result = await resolver.save_images(_batch(["a.jpg", "b.jpg"]), decisions)

    assert result.cancelled
    assert store.get_stats().total_images == 1


@pytest.mark.asyncio
async def test_video_kind_for_images_raises(resolver, decisions) -> None:
    await resolver.save_images(_batch(["a.jpg"]), decisions)
    decisions.image_decisions.append(ResolutionDecision.overwrite())
    with pytest.raises(ValueError):
        await resolver.save_images(_batch(["a.jpg"]), decisions)


@pytest.mark.asyncio
async def test_batch_validation(resolver, decisions) -> None:
    with pytest.raises(ValueError):
        await resolver.save_images(_batch(["a.jpg"], tag="  "), decisions)
    with pytest.raises(ValueError):
        await resolver.save_images(_batch(["a.jpg"], source=""), decisions)
    empty = await resolver.save_images(_batch([]), decisions)
    assert (empty.saved, empty.skipped) == (0, 0)


@pytest.mark.asyncio
async def test_duplicate_members_in_one_batch_are_collapsed(resolver, decisions) -> None:
    result = await resolver.save_images(_batch(["a.jpg", "a.jpg", "b.jpg"]), decisions)
    assert (result.saved, result.skipped) == (2, 0)


@pytest.mark.asyncio
async def test_images_not_configured(unconfigured_store, decisions) -> None:
    resolver = DuplicateResolver(unconfigured_store)
    result = await resolver.save_images(_batch(["a.jpg"]), decisions)
    assert result.error == ErrorKind.NOT_CONFIGURED


def test_save_image_batch_direct(resolver) -> None:
    resolver.save_image_batch(_batch(["a.jpg"]), ResolutionKind.SAVE_ALL)
    result = resolver.save_image_batch(_batch(["a.jpg", "b.jpg"]), ResolutionKind.SAVE_NEW_ONLY)
    assert (result.saved, result.skipped) == (1, 1)
    with pytest.raises(ValueError):
        resolver.save_image_batch(_batch(["a.jpg"]), ResolutionKind.KEEP_EXISTING)


def test_image_details_are_normalized_and_frozen() -> None:
    details = ImageDetails("  beach ", "   ")
    assert details == ImageDetails("beach")
    assert details.comments is None
    with pytest.raises(AttributeError):
        details.tag = "sunset"
