"""View state for the animated map screen.

The controller here knows nothing about Qt or Leaflet.  It owns the
viewport, map style, marker list and the two toggle flags, and tells its
listeners about every change together with the animation the change asks
for.
"""

from __future__ import annotations

import enum
import logging
import random
import uuid
from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional, Tuple

# San Francisco / Los Angeles
CITY_A = (37.7749, -122.4194)
CITY_B = (34.0522, -118.2437)
CITY_A_NAME = "San Francisco"
CITY_B_NAME = "Los Angeles"
DEFAULT_SPAN = (0.05, 0.05)

FLIP_DURATION = 1.0
CITY_DURATION = 2.0
EASE_IN_OUT = "ease-in-out"


class MapStyle(enum.Enum):
    STANDARD = "standard"
    SATELLITE = "satellite"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, value: "MapStyle | str") -> "MapStyle":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown map style {value!r}") from None


@dataclass(frozen=True)
class Viewport:
    center_latitude: float
    center_longitude: float
    latitude_span: float
    longitude_span: float

    def __post_init__(self) -> None:
        if not (self.latitude_span > 0 and self.longitude_span > 0):
            raise ValueError(
                f"Viewport spans must be positive, got "
                f"({self.latitude_span}, {self.longitude_span})"
            )

    @property
    def center(self) -> Tuple[float, float]:
        return (self.center_latitude, self.center_longitude)

    def bounds(self) -> Tuple[float, float, float, float]:
        """Return ``(south, west, north, east)`` in degrees."""
        half_lat = self.latitude_span / 2.0
        half_lon = self.longitude_span / 2.0
        return (
            self.center_latitude - half_lat,
            self.center_longitude - half_lon,
            self.center_latitude + half_lat,
            self.center_longitude + half_lon,
        )

    def contains(self, latitude: float, longitude: float) -> bool:
        south, west, north, east = self.bounds()
        return south <= latitude <= north and west <= longitude <= east

    def recentered(self, latitude: float, longitude: float) -> "Viewport":
        return replace(self, center_latitude=latitude, center_longitude=longitude)


@dataclass(frozen=True)
class Marker:
    coordinate: Tuple[float, float]
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def latitude(self) -> float:
        return self.coordinate[0]

    @property
    def longitude(self) -> float:
        return self.coordinate[1]


@dataclass(frozen=True)
class TransitionFlags:
    showing_city_a: bool = True
    flipped: bool = False


@dataclass(frozen=True)
class Animation:
    duration: float
    curve: str = EASE_IN_OUT


@dataclass(frozen=True)
class Transition:
    """Animations requested by a single state change."""

    viewport: Optional[Animation] = None
    transform: Optional[Animation] = None


@dataclass(frozen=True)
class ViewState:
    viewport: Viewport
    style: MapStyle
    markers: Tuple[Marker, ...]
    flags: TransitionFlags

    @property
    def flipped(self) -> bool:
        return self.flags.flipped


def initial_viewport() -> Viewport:
    return Viewport(CITY_A[0], CITY_A[1], DEFAULT_SPAN[0], DEFAULT_SPAN[1])


def random_coordinate(viewport: Viewport, rng: random.Random) -> Tuple[float, float]:
    """Sample a coordinate uniformly inside ``viewport`` (bounds included)."""
    south, west, north, east = viewport.bounds()
    latitude = rng.uniform(south, north)
    longitude = rng.uniform(west, east)
    # uniform() may round just past b
    latitude = min(max(latitude, south), north)
    longitude = min(max(longitude, west), east)
    return (latitude, longitude)


Listener = Callable[[ViewState, Transition], None]


class MapViewController:
    """Own the map screen state and apply the user actions to it."""

    def __init__(
        self,
        viewport: Viewport | None = None,
        style: MapStyle = MapStyle.STANDARD,
        rng: random.Random | None = None,
    ) -> None:
        self._viewport = viewport or initial_viewport()
        self._style = MapStyle.parse(style)
        self._markers: List[Marker] = []
        self._flags = TransitionFlags()
        self._rng = rng or random.Random()
        self._listeners: List[Listener] = []

    # --- Observation ---
    def subscribe(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def snapshot(self) -> ViewState:
        return ViewState(
            viewport=self._viewport,
            style=self._style,
            markers=tuple(self._markers),
            flags=self._flags,
        )

    def _notify(self, transition: Transition | None = None) -> None:
        state = self.snapshot()
        transition = transition or Transition()
        for listener in list(self._listeners):
            listener(state, transition)

    # --- Read accessors ---
    @property
    def viewport(self) -> Viewport:
        return self._viewport

    @property
    def style(self) -> MapStyle:
        return self._style

    @property
    def markers(self) -> Tuple[Marker, ...]:
        return tuple(self._markers)

    @property
    def flags(self) -> TransitionFlags:
        return self._flags

    @property
    def next_city_name(self) -> str:
        return CITY_B_NAME if self._flags.showing_city_a else CITY_A_NAME

    # --- Actions ---
    def set_map_style(self, style: MapStyle | str) -> None:
        style = MapStyle.parse(style)
        if style is self._style:
            return
        self._style = style
        logging.debug("Map style set to %s", style.value)
        self._notify()

    def toggle_flip(self) -> None:
        self._flags = replace(self._flags, flipped=not self._flags.flipped)
        logging.debug("Flip toggled, flipped=%s", self._flags.flipped)
        self._notify(Transition(transform=Animation(FLIP_DURATION)))

    def toggle_city(self) -> None:
        if self._flags.showing_city_a:
            target = CITY_B
        else:
            target = CITY_A
        self._viewport = self._viewport.recentered(*target)
        self._flags = replace(self._flags, showing_city_a=not self._flags.showing_city_a)
        logging.debug(
            "Viewport moved to %.4f, %.4f", self._viewport.center_latitude,
            self._viewport.center_longitude,
        )
        self._notify(Transition(viewport=Animation(CITY_DURATION)))

    def add_random_marker(self) -> Marker:
        marker = Marker(random_coordinate(self._viewport, self._rng))
        self._markers.append(marker)
        logging.debug(
            "Added marker %s at %.5f, %.5f", marker.id, marker.latitude, marker.longitude
        )
        self._notify()
        return marker

    def clear_markers(self) -> None:
        count = len(self._markers)
        self._markers.clear()
        logging.debug("Cleared %d markers", count)
        self._notify()
