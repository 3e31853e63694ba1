import pytest

from src.core.dto.resolution import FieldSource, MergeField, ResolutionDecision, ResolutionKind
from src.core.dto.video import VideoRecord, parse_view_count


@pytest.mark.parametrize(
    "text, expected",
    [
        ("1,234,567 views", 1234567),
        ("0 views", 0),
        ("42", 42),
        ("views: 12", None),
        ("", None),
        (None, None),
        (1500, 1500),
        (-3, None),
    ],
)
def test_parse_view_count(text, expected) -> None:
    assert parse_view_count(text) == expected


def test_from_scrape_builds_candidate_and_reports_missing() -> None:
    payload = {
        "url": "https://hanime.tv/videos/hentai/title-1",
        "title": "  Title 1 ",
        "views": "12,345 views",
        "thumbnail": "https://cdn/cover.jpg",
        "brand": None,
        "releaseDate": "2020-01-01",
        "tags": ["a", "", "b"],
        "plot": "",
    }
    record, missing = VideoRecord.from_scrape(payload)

    assert record.title == "Title 1"
    assert record.views == 12345
    assert record.tags == ("a", "b")
    assert record.brand is None
    assert record.plot is None
    assert set(missing) == {"brand", "plot"}


def test_from_scrape_keeps_unknown_views_distinct_from_zero() -> None:
    record, missing = VideoRecord.from_scrape({"url": "u", "views": "n/a"})
    assert record.views is None
    assert "views" not in missing  # present but unparseable


def test_field_merge_rejects_unknown_field() -> None:
    with pytest.raises(ValueError):
        ResolutionDecision.field_merge({"brand": "existing"})


def test_field_merge_accepts_strings_and_defaults_to_candidate() -> None:
    decision = ResolutionDecision.field_merge({"title": "existing"})
    assert decision.kind == ResolutionKind.FIELD_MERGE
    assert decision.source_for(MergeField.TITLE) == FieldSource.EXISTING
    assert decision.source_for(MergeField.PLOT) == FieldSource.CANDIDATE


def test_parse_view_count_keeps_counts_beyond_32_bits() -> None:
    views = 3_456_789_012
    assert parse_view_count(f"{views:,}") == views
    assert parse_view_count(str(views)) == views
