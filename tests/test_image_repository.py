import numpy as np
import pytest

from backend.models import ImageRef
from backend.services.image_repository import ImageRepository
from backend.services.thumbnail_cache import ThumbnailCache
from common.errors import RepositoryLookupError


def test_all_images_follows_open_order(two_files):
    repo, first, second = two_files
    assert repo.all_images() == [ImageRef(first, 0), ImageRef(first, 1), ImageRef(second, 0)]


def test_titles_and_default_title(repository, refs):
    assert repository.get_title(refs["b"]) == "b"
    cid = repository.collection_ids()[0]
    repository.collection(cid).set_title(refs["b"].image_id, "")
    assert repository.get_title(refs["b"]) == f"Image {refs['b'].image_id}"


def test_duplicate_is_independent(repository, refs):
    target = repository.create_collection(name="copies")
    copy = repository.duplicate_image(refs["a"], target)
    assert copy.collection_id == target
    assert repository.get_title(copy) == "a"
    repository.get_pixel_data(copy)[0, 0] = 1e6
    assert repository.get_pixel_data(refs["a"])[0, 0] != 1e6


def test_convert_physical_to_pixel_uses_own_geometry(repository, refs):
    assert repository.convert_physical_to_pixel(refs["a"], 10.0, 20.0) == pytest.approx((20.0, 10.0))
    assert repository.convert_physical_to_pixel(refs["b"], 10.0, 20.0) == pytest.approx((10.0, 5.0))
    assert repository.convert_physical_to_pixel(refs["c"], 5.0, 5.0) == pytest.approx((10.0, 20.0))


def test_lookup_miss_raises(repository):
    with pytest.raises(RepositoryLookupError):
        repository.get_field(ImageRef(99, 0))
    cid = repository.collection_ids()[0]
    with pytest.raises(RepositoryLookupError) as info:
        repository.get_field(ImageRef(cid, 42))
    assert "42" in str(info.value)
    assert isinstance(info.value, KeyError)


def test_resolves(repository, refs):
    assert repository.resolves(refs["a"])
    assert not repository.resolves(ImageRef(refs["a"].collection_id, 99))
    assert not repository.resolves(ImageRef(99, 0))


def test_remove_collection_emits_and_forgets(repository, recorder):
    removed = recorder(repository.collectionRemoved)
    cid = repository.collection_ids()[0]
    repository.remove_collection(cid)
    assert removed.calls == [(cid,)]
    assert repository.all_images() == []
    with pytest.raises(RepositoryLookupError):
        repository.remove_collection(cid)


def test_thumbnail_cache_tracks_revision(repository, refs):
    first = repository.render_thumbnail(refs["a"], 16, 16)
    assert repository.render_thumbnail(refs["a"], 16, 16) is first
    repository.get_pixel_data(refs["a"])[:] = 0.0
    repository.notify_data_changed(refs["a"])
    again = repository.render_thumbnail(refs["a"], 16, 16)
    assert again is not first
    assert np.all(again == again[0, 0])


def test_visibility_signal_only_on_change(repository, refs, recorder):
    changes = recorder(repository.visibilityChanged)
    repository.set_visible(refs["a"], True)
    repository.set_visible(refs["a"], True)
    repository.set_visible(refs["a"], False)
    ref = refs["a"]
    assert changes.calls == [
        (ref.collection_id, ref.image_id, True),
        (ref.collection_id, ref.image_id, False),
    ]


def test_data_changed_signal(repository, refs, recorder):
    changed = recorder(repository.dataChanged)
    repository.notify_data_changed(refs["c"])
    assert changed.calls == [(refs["c"].collection_id, refs["c"].image_id)]


def test_selection_store_per_key(qapp):
    repo = ImageRepository()
    collection = repo.collection(repo.create_collection(name="w"))
    collection.set_selection("/0/select/dc/point", [(1, 2)])
    collection.set_selection("/1/select/dc/point", [(3.5, 4.5)])
    assert collection.selection("/0/select/dc/point") == [(1.0, 2.0)]
    assert collection.selection_keys() == ["/0/select/dc/point", "/1/select/dc/point"]
    assert collection.selection("/7/select/dc/point") == []


def test_thumbnail_cache_lru_eviction():
    cache = ThumbnailCache(2)
    img = np.zeros((2, 2), dtype=np.uint8)
    cache.put((0, 0), 0, img)
    cache.put((0, 1), 0, img)
    cache.get((0, 0), 0)
    evicted = cache.put((1, 0), 0, img)
    assert evicted == [(0, 1)]
    assert cache.get((0, 0), 1) is None
    cache.invalidate((1,))
    assert len(cache) == 0
