"""Animated map demo: view state, surface adapter and the Qt window."""

from .adapter import MapSurfaceAdapter
from .state import (
    Animation,
    MapStyle,
    MapViewController,
    Marker,
    Transition,
    TransitionFlags,
    ViewState,
    Viewport,
)
from .surface import NullSurface, RenderSurface, SurfaceCallbacks, SurfaceState, desired_surface_state

__all__ = [
    "Animation",
    "MapStyle",
    "MapSurfaceAdapter",
    "MapViewController",
    "Marker",
    "NullSurface",
    "RenderSurface",
    "SurfaceCallbacks",
    "SurfaceState",
    "Transition",
    "TransitionFlags",
    "ViewState",
    "Viewport",
    "desired_surface_state",
]
