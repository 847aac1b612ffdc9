import cv2
import numpy as np
import pytest
import yaml

from backend.services.folder_loader import (dirname_of, load_files, load_folder,
                                            load_scan_file, scan_folder)
from backend.services.image_repository import ImageRepository
from common.errors import ScanLoadError


def _write_scan(path, rows=12, cols=20, sidecar=None):
    data = (np.arange(rows * cols, dtype=np.uint16).reshape(rows, cols) % 251).astype(np.uint8)
    assert cv2.imwrite(str(path), data)
    if sidecar is not None:
        path.with_suffix(".yaml").write_text(yaml.safe_dump(sidecar), encoding="utf-8")
    return data


@pytest.mark.parametrize(
    "path, expected",
    [
        ("/data/scans/a.tif", "/data/scans"),
        ("C:\\scans\\b.tif", "C:\\scans"),
        ("b.tif", "."),
        ("/b.tif", "/"),
        ("", "."),
    ],
)
def test_dirname_of(path, expected):
    assert dirname_of(path) == expected


def test_scan_folder_filters_and_sorts(tmp_path):
    for name in ("b.png", "a.TIF", "notes.txt", "c.jpeg", "a.yaml"):
        (tmp_path / name).write_bytes(b"")
    (tmp_path / "sub.png").mkdir()
    assert [p.name for p in scan_folder(tmp_path)] == ["a.TIF", "b.png", "c.jpeg"]
    assert [p.name for p in scan_folder(tmp_path, [".png"])] == ["b.png"]


def test_scan_folder_missing_directory(tmp_path):
    assert scan_folder(tmp_path / "nope") == []


def test_load_scan_file_uses_sidecar(tmp_path):
    path = tmp_path / "topo.png"
    data = _write_scan(path, sidecar={"x_real": 4.0e-7, "y_real": 2.0e-7, "titles": ["Height"]})
    collection = load_scan_file(path)
    assert collection.filename == path
    assert collection.image_ids() == [0]
    field = collection.field(0)
    assert np.array_equal(field.data, data.astype(np.float64))
    assert field.x_real == pytest.approx(4.0e-7)
    assert field.y_real == pytest.approx(2.0e-7)
    assert collection.title(0) == "Height"


def test_load_scan_file_defaults(tmp_path):
    path = tmp_path / "plain.png"
    _write_scan(path, rows=10, cols=30)
    field = load_scan_file(path).field(0)
    assert field.x_real == pytest.approx(30e-9)
    assert field.y_real == pytest.approx(10e-9)
    assert load_scan_file(path).title(0) == "plain"


def test_load_scan_file_pixel_size(tmp_path):
    path = tmp_path / "sized.png"
    _write_scan(path, rows=10, cols=20, sidecar={"pixel_size": 2.0})
    field = load_scan_file(path).field(0)
    assert (field.x_real, field.y_real) == (40.0, 20.0)


def test_load_scan_file_errors(tmp_path):
    with pytest.raises(ScanLoadError):
        load_scan_file(tmp_path / "absent.png")
    broken = tmp_path / "broken.png"
    broken.write_bytes(b"not an image")
    with pytest.raises(ScanLoadError):
        load_scan_file(broken)


def test_load_folder_skips_unreadable(tmp_path, qapp, recorder):
    _write_scan(tmp_path / "one.png")
    _write_scan(tmp_path / "two.png")
    (tmp_path / "bad.png").write_bytes(b"garbage")
    repo = ImageRepository()
    added = recorder(repo.collectionAdded)
    loaded = load_folder(repo, tmp_path)
    assert len(loaded) == 2
    assert len(added) == 2
    assert [repo.collection(cid).name for cid in loaded] == ["one.png", "two.png"]
    assert all(repo.collection(cid).keep_invisible for cid in loaded)


def test_load_files_visible_mode(tmp_path, qapp):
    path = tmp_path / "one.png"
    _write_scan(path)
    repo = ImageRepository()
    (cid,) = load_files(repo, [path], keep_invisible=False)
    assert not repo.collection(cid).keep_invisible
    assert len(repo.all_images()) == 1


@pytest.mark.parametrize(
    "sidecar",
    [{"x_real": 0}, {"y_real": -1.0e-7}, {"x_real": "wide"}, {"pixel_size": "tiny"}],
)
def test_load_scan_file_rejects_bad_geometry(tmp_path, sidecar):
    path = tmp_path / "bad.png"
    _write_scan(path, sidecar=sidecar)
    with pytest.raises(ScanLoadError):
        load_scan_file(path)


def test_load_files_skips_bad_sidecar(tmp_path, qapp):
    bad = tmp_path / "bad.png"
    good = tmp_path / "good.png"
    _write_scan(bad, sidecar={"x_real": 0})
    _write_scan(good)
    repo = ImageRepository()
    loaded = load_files(repo, [bad, good])
    assert len(loaded) == 1
    assert repo.collection(loaded[0]).filename == good
