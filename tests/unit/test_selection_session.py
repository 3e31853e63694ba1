import pytest

from src.core.selection_session import SelectionSession, SessionMode


@pytest.fixture
def session() -> SelectionSession:
    return SelectionSession()


def test_starts_idle(session) -> None:
    snap = session.snapshot()
    assert snap.mode == SessionMode.IDLE
    assert snap.chosen == frozenset()
    assert snap.source_url is None


def test_begin_only_from_idle(session) -> None:
    assert session.begin("https://site/browse/images")
    generation = session.generation
    assert not session.begin("https://site/browse/images")
    assert session.generation == generation
    assert session.mode == SessionMode.ACTIVE


def test_resolve_and_resume(session) -> None:
    assert not session.start_resolving()
    session.begin("page")
    assert session.start_resolving()
    session.record_selection(["a", "b", "a"])
    assert session.chosen == {"a", "b"}
    assert session.last_synced_count == 2
    assert session.resume()
    assert session.mode == SessionMode.ACTIVE
    assert not session.resume()


def test_record_selection_requires_resolving(session) -> None:
    session.begin("page")
    with pytest.raises(RuntimeError):
        session.record_selection(["a"])


def test_polled_count_from_old_generation_is_dropped(session) -> None:
    session.begin("page")
    old = session.generation
    assert session.apply_polled_count(old, 3)
    assert session.last_synced_count == 3

    session.end()
    session.begin("page")
    assert not session.apply_polled_count(old, 7)
    assert session.last_synced_count == 0


def test_polled_count_never_changes_chosen(session) -> None:
    session.begin("page")
    session.start_resolving()
    session.record_selection(["a"])
    session.resume()
    session.apply_polled_count(session.generation, 5)
    assert session.chosen == {"a"}


def test_polled_count_ignored_when_idle(session) -> None:
    assert not session.apply_polled_count(session.generation, 4)
    assert session.last_synced_count == 0


def test_end_clears_and_is_idempotent(session) -> None:
    session.begin("page")
    session.start_resolving()
    session.record_selection(["a"])
    session.end()
    generation = session.generation

    snap = session.snapshot()
    assert snap.mode == SessionMode.IDLE
    assert snap.chosen == frozenset()
    assert snap.source_url is None

    session.end()
    assert session.generation == generation
