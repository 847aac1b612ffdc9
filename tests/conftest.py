import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import numpy as np
import pytest
from PyQt6.QtCore import QCoreApplication

from backend.services.drift_session import DriftSession
from backend.services.image_repository import ImageRepository
from backend.services.selection_set import SelectionSet
from backend.utils.fields import ImageField
from config import reset_config


@pytest.fixture(scope="session")
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture(autouse=True)
def _fresh_config():
    reset_config()
    yield
    reset_config()


def make_field(rows: int, cols: int, dx: float, dy: float, seed: int = 0) -> ImageField:
    """Tilted plane plus noise so leveling has something to remove."""
    rng = np.random.default_rng(seed)
    r, c = np.indices((rows, cols), dtype=np.float64)
    data = 3.0 + 0.2 * c - 0.1 * r + rng.normal(0.0, 0.01, (rows, cols))
    return ImageField(data, x_real=cols * dx, y_real=rows * dy)


@pytest.fixture
def repository(qapp):
    """One open file holding images "a", "b", "c" with different geometries.

    a: 64x64 px, 1.0 per pixel
    b: 40x40 px, 2.0 per pixel
    c: 32 rows x 48 cols, 0.25 per pixel along x and 0.5 along y
    """
    repo = ImageRepository()
    cid = repo.create_collection(filename="/data/scans/sample.tif")
    repo.add_image(cid, make_field(64, 64, 1.0, 1.0, seed=1), "a")
    repo.add_image(cid, make_field(40, 40, 2.0, 2.0, seed=2), "b")
    repo.add_image(cid, make_field(32, 48, 0.25, 0.5, seed=3), "c")
    return repo


@pytest.fixture
def refs(repository):
    return {repository.get_title(ref): ref for ref in repository.all_images()}


@pytest.fixture
def two_files(qapp):
    repo = ImageRepository()
    first = repo.create_collection(name="first")
    second = repo.create_collection(name="second")
    repo.add_image(second, make_field(16, 16, 1.0, 1.0, seed=4), "s0")
    repo.add_image(first, make_field(16, 16, 1.0, 1.0, seed=5), "f0")
    repo.add_image(first, make_field(16, 16, 1.0, 1.0, seed=6), "f1")
    return repo, first, second


class SignalRecorder:
    def __init__(self, signal):
        self.calls = []
        signal.connect(self._record)

    def _record(self, *args):
        self.calls.append(args)

    def __len__(self):
        return len(self.calls)


@pytest.fixture
def recorder():
    return SignalRecorder


@pytest.fixture
def field_factory():
    return make_field


@pytest.fixture
def start_session(repository):
    """Open a session, tick the given titles in the prompt and materialize them."""
    def _start(*titles):
        session = DriftSession.start(repository)
        selection = SelectionSet.from_snapshot(repository, session.all_images, thumbnail_size=32)
        for index, entry in enumerate(selection.entries):
            if entry.title in titles:
                selection.set_selected(index, True)
        session.materialize(selection.confirm())
        return session

    return _start
