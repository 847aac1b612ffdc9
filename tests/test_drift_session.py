import itertools

import numpy as np
import pytest

from backend.models import PendingSelection
from backend.services.drift_session import (DriftSession, NextImage,
                                            PointSelected, PreviousImage,
                                            RunExtraction)
from backend.services.selection_set import SelectionSet
from common.errors import EmptySelectionError, SessionStateError

SUBSETS = [
    subset
    for size in (1, 2, 3)
    for subset in itertools.combinations(("a", "b", "c"), size)
]


@pytest.mark.parametrize("subset", SUBSETS, ids=lambda s: "+".join(s))
def test_materialized_images_live_in_working_collection(start_session, repository, subset):
    session = start_session(*subset)
    working_id = session.working_collection_id
    assert working_id is not None
    assert len(repository.image_ids(working_id)) == len(subset)
    assert len(session) == len(subset)
    for item in session.selected:
        assert item.working.collection_id == working_id
        assert repository.resolves(item.working)
        assert item.working != item.original
    assert [repository.get_title(item.working) for item in session.selected] == list(subset)
    assert session.preview_reference == session.selected[0].working


def test_working_copies_do_not_alias_originals(start_session, repository):
    session = start_session("a", "b")
    first = session.selected[0]
    repository.get_pixel_data(first.working)[:] = 0.0
    assert not np.all(repository.get_pixel_data(first.original) == 0.0)


def test_snapshot_is_not_live(repository):
    session = DriftSession.start(repository)
    repository.create_collection(name="later")
    cid = repository.collection_ids()[0]
    repository.add_image(cid, repository.get_field(repository.all_images()[0]).duplicate(), "d")
    assert len(session.all_images) == 3


def test_materialize_empty_subset_raises(repository):
    session = DriftSession.start(repository)
    with pytest.raises(EmptySelectionError):
        session.materialize([])
    assert not session.is_materialized
    assert len(repository.collection_ids()) == 1


def test_materialize_twice_raises(start_session, refs):
    session = start_session("a")
    with pytest.raises(SessionStateError):
        session.materialize([PendingSelection(refs["b"])])


def test_events_before_materialize_raise(repository):
    session = DriftSession.start(repository)
    with pytest.raises(SessionStateError):
        session.handle(NextImage())


def test_unknown_event_is_rejected(start_session):
    session = start_session("a")
    with pytest.raises(TypeError):
        session.handle("next")


@pytest.mark.parametrize("presses", [1, 2, 7])
def test_previous_clamps_at_zero(start_session, presses):
    session = start_session("a", "b", "c")
    for _ in range(presses):
        outcome = session.handle(PreviousImage())
        assert not outcome.cursor_changed
    assert session.cursor == 0


@pytest.mark.parametrize("presses", [2, 3, 10])
def test_next_clamps_at_last(start_session, presses):
    session = start_session("a", "b", "c")
    for _ in range(presses):
        session.handle(NextImage())
    assert session.cursor == 2
    assert session.active is session.selected[2]


def test_cursor_signal(start_session, recorder):
    session = start_session("a", "c")
    moves = recorder(session.cursorChanged)
    session.next()
    session.next()
    session.previous()
    assert moves.calls == [(1,), (0,)]


def test_point_selected_last_write_wins(start_session):
    session = start_session("a", "b")
    session.handle(PointSelected(1.0, 2.0))
    session.handle(PointSelected(3.0, 4.0))
    point = session.selected[0].point
    assert (point.x, point.y) == (3.0, 4.0)
    assert session.selected[1].point is None


def test_run_returns_offsets_in_subset_order(start_session, recorder):
    session = start_session("b", "c")
    ready = recorder(session.offsetsReady)
    outcome = session.handle(RunExtraction())
    assert [o.title for o in outcome.offsets] == ["b", "c"]
    assert len(ready) == 1


def test_close_keeps_working_collection_by_default(start_session, repository):
    session = start_session("a")
    working_id = session.working_collection_id
    session.close()
    assert session.is_closed
    assert repository.has_collection(working_id)
    with pytest.raises(SessionStateError):
        session.next()


def test_close_can_remove_working_collection(start_session, repository):
    session = start_session("a")
    working_id = session.working_collection_id
    session.close(remove_working_collection=True)
    assert not repository.has_collection(working_id)


def test_cancelled_prompt_leaves_repository_untouched(repository):
    before_ids = repository.collection_ids()
    before_images = repository.all_images()
    session = DriftSession.start(repository)
    selection = SelectionSet.from_snapshot(repository, session.all_images, thumbnail_size=24)
    selection.set_selected(0, True)
    selection.cancel()
    session.close()
    assert repository.collection_ids() == before_ids
    assert repository.all_images() == before_images
    assert session.working_collection_id is None
    assert session.selected == []
    assert session.all_images == []
    assert len(selection) == 0
