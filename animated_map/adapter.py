"""Apply view state snapshots to a render surface."""

from __future__ import annotations

import logging
from typing import Optional

from .state import FLIP_DURATION, Transition, ViewState
from .surface import RenderSurface, SurfaceState, desired_surface_state


class MapSurfaceAdapter:
    """Push view state onto a render surface, issuing only the calls needed.

    The adapter remembers the last :class:`SurfaceState` it applied and diffs
    each new snapshot against it.  The first ``apply`` mounts the surface
    without animation.  Annotations are always replaced in full.
    """

    def __init__(self, surface: RenderSurface) -> None:
        self.surface = surface
        self._applied: Optional[SurfaceState] = None

    @property
    def applied(self) -> Optional[SurfaceState]:
        return self._applied

    def reset(self) -> None:
        """Forget what was applied so the next pass re-mounts the surface."""
        self._applied = None

    def __call__(self, state: ViewState, transition: Transition) -> None:
        self.apply(state, transition)

    def apply(self, state: ViewState, transition: Transition | None = None) -> SurfaceState:
        transition = transition or Transition()
        desired = desired_surface_state(state)
        previous = self._applied
        mounting = previous is None

        if mounting or desired.viewport != previous.viewport:
            if not mounting and transition.viewport is not None:
                animated, duration = True, transition.viewport.duration
            else:
                animated, duration = False, 0.0
            logging.debug(
                "surface.set_viewport(%s, animated=%s, duration=%s)",
                desired.viewport, animated, duration,
            )
            self.surface.set_viewport(desired.viewport, animated, duration)

        if mounting or desired.style is not previous.style:
            logging.debug("surface.set_style(%s)", desired.style.value)
            self.surface.set_style(desired.style)

        self.surface.remove_all_annotations()
        if desired.annotations:
            logging.debug("surface.add_annotations(%d)", len(desired.annotations))
            self.surface.add_annotations(desired.annotations)

        if mounting or desired.flipped != previous.flipped:
            if mounting:
                duration = 0.0
            elif transition.transform is not None:
                duration = transition.transform.duration
            else:
                duration = FLIP_DURATION
            logging.debug(
                "surface.set_transform(flipped=%s, duration=%s)", desired.flipped, duration
            )
            self.surface.set_transform(desired.transform, duration)

        self._applied = desired
        return desired
