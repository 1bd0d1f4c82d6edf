"""Render surface contract and the pure "desired surface state" function."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence, Tuple

from .state import MapStyle, ViewState, Viewport

PERSPECTIVE_DISTANCE = 500.0

Matrix4 = Tuple[
    Tuple[float, float, float, float],
    Tuple[float, float, float, float],
    Tuple[float, float, float, float],
    Tuple[float, float, float, float],
]
# (marker id, latitude, longitude)
Annotation = Tuple[str, float, float]

IDENTITY: Matrix4 = (
    (1.0, 0.0, 0.0, 0.0),
    (0.0, 1.0, 0.0, 0.0),
    (0.0, 0.0, 1.0, 0.0),
    (0.0, 0.0, 0.0, 1.0),
)


class RenderSurface(Protocol):
    """Operations the adapter needs from whatever draws the map."""

    def set_viewport(self, viewport: Viewport, animated: bool, duration: float) -> None:
        ...

    def set_style(self, style: MapStyle) -> None:
        ...

    def remove_all_annotations(self) -> None:
        ...

    def add_annotations(self, annotations: Sequence[Annotation]) -> None:
        ...

    def set_transform(self, matrix: Matrix4, duration: float) -> None:
        ...


@dataclass
class SurfaceCallbacks:
    """Named slots a surface calls back into.  Every slot is optional."""

    on_ready: Optional[Callable[[], None]] = None
    on_annotation_clicked: Optional[Callable[[str], None]] = None
    on_load_failed: Optional[Callable[[], None]] = None

    def ready(self) -> None:
        if self.on_ready is not None:
            self.on_ready()

    def annotation_clicked(self, marker_id: str) -> None:
        if self.on_annotation_clicked is not None:
            self.on_annotation_clicked(marker_id)

    def load_failed(self) -> None:
        if self.on_load_failed is not None:
            self.on_load_failed()


class NullSurface:
    """Surface used when no map engine is available; drops every call."""

    def set_viewport(self, viewport: Viewport, animated: bool, duration: float) -> None:
        logging.debug("No map surface: ignoring viewport %s", viewport)

    def set_style(self, style: MapStyle) -> None:
        pass

    def remove_all_annotations(self) -> None:
        pass

    def add_annotations(self, annotations: Sequence[Annotation]) -> None:
        pass

    def set_transform(self, matrix: Matrix4, duration: float) -> None:
        pass


# --- Transform math ---
# Matrices use the Core Animation / CSS layout: row-vector convention,
# m34 holds the perspective term.
def concat(a: Matrix4, b: Matrix4) -> Matrix4:
    """Return ``a`` followed by ``b`` (the row-vector product ``a * b``)."""
    return tuple(
        tuple(sum(a[i][k] * b[k][j] for k in range(4)) for j in range(4))
        for i in range(4)
    )


def perspective(distance: float = PERSPECTIVE_DISTANCE) -> Matrix4:
    rows = [list(row) for row in IDENTITY]
    rows[2][3] = -1.0 / distance
    return tuple(tuple(row) for row in rows)


def rotation(angle: float, x: float, y: float, z: float) -> Matrix4:
    length = math.sqrt(x * x + y * y + z * z)
    if length == 0:
        return IDENTITY
    x, y, z = x / length, y / length, z / length
    c = math.cos(angle)
    s = math.sin(angle)
    t = 1.0 - c
    return (
        (t * x * x + c, t * x * y + s * z, t * x * z - s * y, 0.0),
        (t * x * y - s * z, t * y * y + c, t * y * z + s * x, 0.0),
        (t * x * z + s * y, t * y * z - s * x, t * z * z + c, 0.0),
        (0.0, 0.0, 0.0, 1.0),
    )


def rotate(matrix: Matrix4, angle: float, x: float, y: float, z: float) -> Matrix4:
    """Rotate ``matrix`` by ``angle`` radians about ``(x, y, z)``.

    The rotation is applied before ``matrix``, like ``CATransform3DRotate``.
    """
    return concat(rotation(angle, x, y, z), matrix)


def flip_transform(flipped: bool, distance: float = PERSPECTIVE_DISTANCE) -> Matrix4:
    """Perspective transform turned 0 or 180 degrees about the vertical axis."""
    angle = math.pi if flipped else 0.0
    return rotate(perspective(distance), angle, 0.0, 1.0, 0.0)


def to_css_matrix3d(matrix: Matrix4) -> str:
    values = ",".join(f"{value:.10g}" for row in matrix for value in row)
    return f"matrix3d({values})"


# --- Desired surface state ---
@dataclass(frozen=True)
class SurfaceState:
    viewport: Viewport
    style: MapStyle
    annotations: Tuple[Annotation, ...]
    flipped: bool
    transform: Matrix4


def desired_surface_state(state: ViewState) -> SurfaceState:
    return SurfaceState(
        viewport=state.viewport,
        style=state.style,
        annotations=tuple(
            (marker.id, marker.latitude, marker.longitude) for marker in state.markers
        ),
        flipped=state.flipped,
        transform=flip_transform(state.flipped),
    )
