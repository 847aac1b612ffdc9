import numpy as np
import pytest

from backend.models import selection_key
from backend.services.drift_session import DriftSession
from backend.services.preview_controller import PreviewController
from backend.services.preview_surface import PointOverlay, create_preview_surface
from common.errors import SessionStateError


@pytest.fixture
def controller(start_session):
    return PreviewController(start_session("a", "b", "c"))


def test_starts_on_first_image(controller, repository):
    session = controller.session
    assert controller.cursor == 0
    assert controller.shown_ref == session.selected[0].working
    assert controller.title == "a"
    assert np.array_equal(controller.surface.buffer, repository.get_pixel_data(session.selected[0].working))


def test_navigation_rebinds_the_same_surface(controller, repository, recorder):
    surface = controller.surface
    changes = recorder(controller.previewChanged)
    assert controller.next()
    assert controller.surface is surface
    working = controller.session.selected[1].working
    assert controller.shown_ref == working
    assert controller.surface.backing_field.x_real == repository.get_field(working).x_real
    assert np.array_equal(surface.buffer, repository.get_pixel_data(working))
    assert changes.calls == [(1, 3)]


def test_navigation_does_not_write_working_images(controller, repository):
    first = controller.session.selected[0].working
    before = repository.get_pixel_data(first).copy()
    controller.next()
    controller.next()
    assert np.array_equal(repository.get_pixel_data(first), before)


def test_clamped_navigation_reports_no_change(controller):
    assert not controller.previous()
    controller.next()
    controller.next()
    assert not controller.next()
    assert controller.can_go_previous()
    assert not controller.can_go_next()


def test_overlay_is_keyed_to_active_image(controller):
    overlay = controller.surface.overlay
    for _ in range(3):
        working = controller.session.active.working
        assert overlay.selection_key == selection_key(working.image_id)
        assert overlay.max_objects == 1
        controller.next()


def test_point_placement_last_write_wins(controller):
    controller.place_point(1.0, 2.0)
    controller.place_point(7.0, 8.0)
    point = controller.session.selected[0].point
    assert (point.x, point.y) == (7.0, 8.0)
    assert controller.visible_points() == [(7.0, 8.0)]


def test_point_placement_is_per_image(controller, recorder):
    changed = recorder(controller.pointChanged)
    controller.place_point(1.0, 2.0)
    controller.next()
    assert controller.visible_points() == []
    controller.place_point(3.0, 4.0)
    controller.previous()
    assert controller.visible_points() == [(1.0, 2.0)]
    point_a = controller.session.selected[0].point
    point_b = controller.session.selected[1].point
    assert (point_a.x, point_a.y) == (1.0, 2.0)
    assert (point_b.x, point_b.y) == (3.0, 4.0)
    assert changed.calls == [(0,), (1,)]


def test_navigating_away_without_point_is_not_an_error(controller):
    controller.next()
    controller.next()
    assert all(item.point is None for item in controller.session.selected)


def test_missing_overlay_is_rebuilt_on_navigation(controller):
    controller.place_point(1.0, 1.0)
    controller.surface.drop_overlay()
    controller.next()
    overlay = controller.surface.overlay
    assert overlay is not None
    assert overlay.selection_key == selection_key(controller.session.active.working.image_id)
    controller.previous()
    assert controller.visible_points() == [(1.0, 1.0)]


def test_missing_overlay_is_rebuilt_on_placement(controller):
    controller.surface.drop_overlay()
    controller.place_point(2.0, 3.0)
    point = controller.session.selected[0].point
    assert (point.x, point.y) == (2.0, 3.0)


def test_points_are_stored_in_working_collection(controller, repository):
    controller.place_point(1.0, 2.0)
    working_id = controller.session.working_collection_id
    key = selection_key(controller.session.selected[0].working.image_id)
    assert repository.collection(working_id).selection(key) == [(1.0, 2.0)]
    for original in {item.original.collection_id for item in controller.session.selected}:
        assert repository.collection(original).selection_keys() == []


def test_run_emits_offsets(controller, recorder):
    finished = recorder(controller.extractionFinished)
    offsets = controller.run()
    assert len(offsets) == 3
    assert finished.calls == [(offsets,)]


def test_overlay_without_key_refuses_points(repository):
    cid = repository.collection_ids()[0]
    overlay = PointOverlay(repository.collection(cid))
    with pytest.raises(SessionStateError):
        overlay.finish(0.0, 0.0)


def test_overlay_cap_trims_existing_points(repository):
    cid = repository.collection_ids()[0]
    overlay = PointOverlay(repository.collection(cid), max_objects=3)
    overlay.set_selection_key("/0/select/dc/point")
    for value in (1.0, 2.0, 3.0):
        overlay.finish(value, value)
    overlay.set_max_objects(1)
    assert overlay.points() == [(3.0, 3.0)]


def test_preview_surface_must_live_in_collection(repository, refs):
    other = repository.create_collection(name="elsewhere")
    with pytest.raises(SessionStateError):
        create_preview_surface(repository, other, refs["a"])


def test_controller_needs_materialized_session(repository):
    session = DriftSession.start(repository)
    with pytest.raises(SessionStateError):
        PreviewController(session)
