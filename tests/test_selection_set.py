import numpy as np
import pytest

from backend.services.selection_set import SelectionSet
from backend.utils.leveling import level_plane
from common.errors import EmptySelectionError, SessionStateError


@pytest.fixture
def selection(repository):
    return SelectionSet.from_snapshot(repository, repository.all_images(), thumbnail_size=24)


def test_entries_are_titled_thumbnails(selection):
    assert [e.title for e in selection.entries] == ["a", "b", "c"]
    for entry in selection.entries:
        assert entry.thumbnail.dtype == np.uint8
        assert max(entry.thumbnail.shape) == 24


def test_confirm_returns_repository_order_not_click_order(selection, refs):
    selection.set_selected(2, True)
    selection.set_selected(0, True)
    assert [p.original for p in selection.confirm()] == [refs["a"], refs["c"]]


def test_confirm_with_nothing_selected_raises(selection):
    assert not selection.can_confirm
    with pytest.raises(EmptySelectionError):
        selection.confirm()


def test_confirm_allowed_follows_selection(selection, recorder):
    allowed = recorder(selection.confirmAllowedChanged)
    selection.set_selected(1, True)
    selection.set_selected(2, True)
    selection.toggle(1)
    selection.toggle(2)
    assert allowed.calls == [(True,), (False,)]


def test_replace_selection(selection):
    selection.replace_selection([0, 1])
    selection.replace_selection([1, 2])
    assert selection.selected_indices == [1, 2]
    selection.clear()
    assert selection.selected_indices == []


def test_out_of_range_index(selection):
    with pytest.raises(IndexError):
        selection.set_selected(3, True)


def test_cancel_releases_entries(selection):
    selection.set_selected(0, True)
    selection.cancel()
    assert len(selection) == 0
    assert not selection.can_confirm
    with pytest.raises(SessionStateError):
        selection.confirm()


def test_thumbnails_level_originals_once(repository, refs):
    expected = repository.get_field(refs["b"]).duplicate()
    level_plane(expected)
    SelectionSet.from_snapshot(repository, repository.all_images(), thumbnail_size=24)
    assert np.allclose(repository.get_pixel_data(refs["b"]), expected.data, atol=1e-9)


def test_repeated_prompts_reuse_thumbnails(repository):
    images = repository.all_images()
    first = SelectionSet.from_snapshot(repository, images, thumbnail_size=24)
    second = SelectionSet.from_snapshot(repository, images, thumbnail_size=24)
    for before, after in zip(first.entries, second.entries):
        assert after.thumbnail is before.thumbnail


def test_changed_image_is_leveled_again(repository, refs):
    images = repository.all_images()
    first = SelectionSet.from_snapshot(repository, images, thumbnail_size=24)
    field = repository.get_field(refs["a"])
    cols = field.data.shape[1]
    field.data += np.arange(cols)[None, :] * 3.0
    repository.notify_data_changed(refs["a"])
    assert not field.is_leveled
    second = SelectionSet.from_snapshot(repository, images, thumbnail_size=24)
    assert field.is_leveled
    assert second.entries[0].thumbnail is not first.entries[0].thumbnail
    assert second.entries[1].thumbnail is first.entries[1].thumbnail
