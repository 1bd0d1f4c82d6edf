"""Shared fixtures for the animated map tests."""

import os
import random
from typing import Any, List, Tuple

import pytest

from animated_map.state import MapViewController

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


class RecordingSurface:
    """Render surface that records every call made to it."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []

    def set_viewport(self, viewport, animated, duration):
        self.calls.append(("set_viewport", (viewport, animated, duration)))

    def set_style(self, style):
        self.calls.append(("set_style", (style,)))

    def remove_all_annotations(self):
        self.calls.append(("remove_all_annotations", ()))

    def add_annotations(self, annotations):
        self.calls.append(("add_annotations", (tuple(annotations),)))

    def set_transform(self, matrix, duration):
        self.calls.append(("set_transform", (matrix, duration)))

    def named(self, name: str) -> List[Tuple[Any, ...]]:
        return [args for call, args in self.calls if call == name]

    def clear(self) -> None:
        self.calls.clear()


@pytest.fixture
def surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture
def controller() -> MapViewController:
    return MapViewController(rng=random.Random(1234))


@pytest.fixture(scope="session")
def qapp():
    QtWidgets = pytest.importorskip("PyQt5.QtWidgets")
    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication([])
    yield app
