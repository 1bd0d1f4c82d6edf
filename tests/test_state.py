"""Tests for the map view state controller."""

import random

import pytest

from animated_map.state import (
    CITY_A,
    CITY_B,
    CITY_DURATION,
    FLIP_DURATION,
    MapStyle,
    MapViewController,
    Viewport,
    random_coordinate,
)


class TestViewport:
    def test_rejects_non_positive_span(self):
        with pytest.raises(ValueError):
            Viewport(0.0, 0.0, 0.0, 1.0)
        with pytest.raises(ValueError):
            Viewport(0.0, 0.0, 1.0, -0.5)

    def test_bounds(self):
        vp = Viewport(10.0, 20.0, 2.0, 4.0)
        assert vp.bounds() == (9.0, 18.0, 11.0, 22.0)
        assert vp.contains(9.0, 22.0)
        assert not vp.contains(11.5, 20.0)

    def test_recentered_keeps_span(self):
        vp = Viewport(10.0, 20.0, 2.0, 4.0).recentered(1.0, 2.0)
        assert vp.center == (1.0, 2.0)
        assert (vp.latitude_span, vp.longitude_span) == (2.0, 4.0)


class TestMapStyle:
    def test_parse_accepts_enum_and_name(self):
        assert MapStyle.parse(MapStyle.SATELLITE) is MapStyle.SATELLITE
        assert MapStyle.parse("Satellite") is MapStyle.SATELLITE
        assert MapStyle.parse(" standard ") is MapStyle.STANDARD

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Unknown map style"):
            MapStyle.parse("hybrid")


class TestInitialState:
    def test_defaults(self, controller):
        state = controller.snapshot()
        assert state.viewport.center == CITY_A
        assert (state.viewport.latitude_span, state.viewport.longitude_span) == (0.05, 0.05)
        assert state.style is MapStyle.STANDARD
        assert state.markers == ()
        assert state.flags.showing_city_a is True
        assert state.flags.flipped is False
        assert controller.next_city_name == "Los Angeles"


class TestRandomMarkers:
    def test_hundred_markers_stay_in_initial_viewport(self, controller):
        for _ in range(100):
            controller.add_random_marker()
        markers = controller.markers
        assert len(markers) == 100
        for marker in markers:
            assert 37.7499 - 1e-9 <= marker.latitude <= 37.7999 + 1e-9
            assert -122.4444 - 1e-9 <= marker.longitude <= -122.3944 + 1e-9

    @pytest.mark.parametrize(
        "viewport",
        [
            Viewport(0.0, 0.0, 1e-9, 1e-9),
            Viewport(-89.0, 179.0, 0.5, 2.0),
            Viewport(51.5, -0.12, 10.0, 0.001),
        ],
    )
    def test_coordinate_within_any_viewport(self, viewport):
        rng = random.Random(7)
        for _ in range(200):
            lat, lon = random_coordinate(viewport, rng)
            assert viewport.contains(lat, lon)

    def test_uses_current_viewport(self, controller):
        controller.toggle_city()
        marker = controller.add_random_marker()
        assert controller.viewport.contains(marker.latitude, marker.longitude)
        assert abs(marker.latitude - CITY_B[0]) <= 0.025

    def test_ids_are_unique_and_order_kept(self, controller):
        added = [controller.add_random_marker() for _ in range(20)]
        assert [m.id for m in controller.markers] == [m.id for m in added]
        assert len({m.id for m in added}) == 20

    def test_count_after_clear(self, controller):
        for _ in range(5):
            controller.add_random_marker()
        controller.clear_markers()
        assert controller.markers == ()
        for _ in range(3):
            controller.add_random_marker()
        assert len(controller.markers) == 3


class TestToggles:
    def test_toggle_city_round_trip(self, controller):
        controller.toggle_city()
        assert controller.viewport.center == (34.0522, -118.2437)
        assert controller.flags.showing_city_a is False
        assert controller.next_city_name == "San Francisco"
        controller.toggle_city()
        assert controller.viewport.center == (37.7749, -122.4194)
        assert controller.flags.showing_city_a is True

    def test_toggle_flip_round_trip(self, controller):
        controller.toggle_flip()
        assert controller.flags.flipped is True
        controller.toggle_flip()
        assert controller.flags.flipped is False


class TestNotifications:
    def test_listeners_receive_snapshot_and_transition(self, controller):
        seen = []
        controller.subscribe(lambda state, transition: seen.append((state, transition)))

        controller.toggle_city()
        state, transition = seen[-1]
        assert state.viewport.center == CITY_B
        assert transition.viewport is not None
        assert transition.viewport.duration == CITY_DURATION
        assert transition.transform is None

        controller.toggle_flip()
        state, transition = seen[-1]
        assert state.flipped is True
        assert transition.transform.duration == FLIP_DURATION
        assert transition.viewport is None

        controller.add_random_marker()
        state, transition = seen[-1]
        assert len(state.markers) == 1
        assert transition.viewport is None and transition.transform is None

    def test_same_style_does_not_notify(self, controller):
        seen = []
        controller.subscribe(lambda state, transition: seen.append(state.style))
        controller.set_map_style(MapStyle.SATELLITE)
        controller.set_map_style("satellite")
        assert seen == [MapStyle.SATELLITE]

    def test_unsubscribe(self, controller):
        seen = []

        def listener(state, transition):
            seen.append(state)

        controller.subscribe(listener)
        controller.subscribe(listener)
        controller.clear_markers()
        controller.unsubscribe(listener)
        controller.clear_markers()
        assert len(seen) == 1

    def test_snapshot_is_not_affected_by_later_changes(self, controller):
        before = controller.snapshot()
        controller.add_random_marker()
        assert before.markers == ()
