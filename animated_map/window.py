from __future__ import annotations
import argparse
import logging
import sys
from typing import Iterable, Optional

from PyQt5 import QtCore, QtGui, QtWidgets

try:
    from PyQt5 import QtWebEngineWidgets
except Exception:
    QtWebEngineWidgets = None

from .adapter import MapSurfaceAdapter
from .map_widget import LeafletMapSurface
from .state import MapStyle, MapViewController, Transition, ViewState
from .surface import NullSurface, RenderSurface, SurfaceCallbacks


MAX_LOAD_RETRIES = 3


class AnimatedMapWindow(QtWidgets.QWidget):
    """Single screen: the map plus its style, flip, city and marker controls.

    By default the map is a Leaflet page in a new ``QWebEngineView``.
    ``map_view`` supplies the web view to host that page instead.
    ``surface`` drives a render surface drawn elsewhere; in that case
    ``map_view`` (or an empty widget) only fills the map area.
    """

    load_retry_ms = 2000

    def __init__(
        self,
        controller: MapViewController | None = None,
        surface: RenderSurface | None = None,
        parent: QtWidgets.QWidget | None = None,
        map_view: QtWidgets.QWidget | None = None,
    ) -> None:
        super().__init__(parent)

        self.setWindowTitle("Animated Map")
        self.settings = QtCore.QSettings("AnimatedMap", self.__class__.__name__)
        geo = self.settings.value("geometry")
        if geo:
            self.restoreGeometry(geo)
        else:
            self.resize(480, 820)

        self.controller = controller or MapViewController()
        self.callbacks = SurfaceCallbacks(
            on_ready=self._map_ready,
            on_annotation_clicked=self._marker_clicked,
            on_load_failed=self._map_load_failed,
        )

        outer_layout = QtWidgets.QVBoxLayout(self)
        outer_layout.setContentsMargins(0, 0, 0, 0)
        outer_layout.setSpacing(0)

        # --- Top bar: style selector & flip ---
        top_bar = QtWidgets.QWidget(self)
        top_bar.setObjectName("controlBar")
        top_layout = QtWidgets.QHBoxLayout(top_bar)
        top_layout.setContentsMargins(12, 8, 16, 8)

        segment = QtWidgets.QWidget(top_bar)
        segment.setObjectName("styleSegment")
        segment_layout = QtWidgets.QHBoxLayout(segment)
        segment_layout.setContentsMargins(0, 0, 0, 0)
        segment_layout.setSpacing(0)
        self.style_group = QtWidgets.QButtonGroup(self)
        self.style_group.setExclusive(True)
        self.style_buttons: dict[MapStyle, QtWidgets.QPushButton] = {}
        for style in MapStyle:
            btn = QtWidgets.QPushButton(style.label)
            btn.setObjectName(f"style{style.label}")
            btn.setCheckable(True)
            btn.setToolTip(f"Show the {style.value} map")
            self.style_group.addButton(btn)
            segment_layout.addWidget(btn)
            self.style_buttons[style] = btn
        self.style_buttons[self.controller.style].setChecked(True)
        self.style_group.buttonClicked[QtWidgets.QAbstractButton].connect(self._style_clicked)
        top_layout.addWidget(segment)
        top_layout.addStretch(1)

        self.flip_btn = QtWidgets.QPushButton()
        self.flip_btn.setObjectName("flipButton")
        self.flip_btn.setIcon(self.style().standardIcon(QtWidgets.QStyle.SP_BrowserReload))
        self.flip_btn.setToolTip("Flip the map in 3D")
        self.flip_btn.clicked.connect(self.controller.toggle_flip)
        top_layout.addWidget(self.flip_btn)
        outer_layout.addWidget(top_bar)

        # --- Map ---
        self.map_view, self.surface = self._create_surface(surface, map_view)
        self.map_view.setMinimumHeight(240)
        outer_layout.addWidget(self.map_view, 1)

        # --- Bottom bar: city, add, clear ---
        bottom_bar = QtWidgets.QWidget(self)
        bottom_bar.setObjectName("controlBar")
        bottom_layout = QtWidgets.QHBoxLayout(bottom_bar)
        bottom_layout.setContentsMargins(12, 8, 12, 8)
        bottom_layout.setSpacing(20)
        bottom_layout.addStretch(1)

        self.city_btn = QtWidgets.QPushButton()
        self.city_btn.setObjectName("cityButton")
        self.city_btn.setIcon(self.style().standardIcon(QtWidgets.QStyle.SP_ArrowForward))
        self.city_btn.clicked.connect(self.controller.toggle_city)
        bottom_layout.addWidget(self.city_btn)

        self.add_btn = QtWidgets.QPushButton("Add Marker")
        self.add_btn.setObjectName("addMarkerButton")
        self.add_btn.setIcon(self.style().standardIcon(QtWidgets.QStyle.SP_DialogApplyButton))
        self.add_btn.setToolTip("Drop a marker somewhere in the visible area")
        self.add_btn.clicked.connect(self.controller.add_random_marker)
        bottom_layout.addWidget(self.add_btn)

        self.clear_btn = QtWidgets.QPushButton("Clear")
        self.clear_btn.setObjectName("clearButton")
        self.clear_btn.setIcon(self.style().standardIcon(QtWidgets.QStyle.SP_TrashIcon))
        self.clear_btn.setToolTip("Remove all markers")
        self.clear_btn.clicked.connect(self.controller.clear_markers)
        bottom_layout.addWidget(self.clear_btn)
        bottom_layout.addStretch(1)
        outer_layout.addWidget(bottom_bar)

        self.status_bar = QtWidgets.QStatusBar(self)
        self.status_bar.setSizeGripEnabled(False)
        outer_layout.addWidget(self.status_bar)
        self._ready_timer = QtCore.QTimer(self)
        self._ready_timer.setSingleShot(True)
        self._ready_timer.timeout.connect(self._set_ready)

        # Mount: the adapter applies the initial state without animation.
        self._map_loaded = False
        self._load_retries = 0
        self.adapter = MapSurfaceAdapter(self.surface)
        self.controller.subscribe(self._state_changed)
        if isinstance(self.surface, LeafletMapSurface):
            self.surface.load()
        self.adapter.apply(self.controller.snapshot())
        self._refresh_controls(self.controller.snapshot())
        self._set_ready()

    def _create_surface(
        self, surface: RenderSurface | None, map_view: QtWidgets.QWidget | None
    ) -> tuple[QtWidgets.QWidget, RenderSurface]:
        if surface is not None:
            return map_view or QtWidgets.QWidget(self), surface
        if map_view is not None:
            return map_view, LeafletMapSurface(map_view, self.callbacks, self)
        if QtWebEngineWidgets is None:
            logging.warning("Qt WebEngine is not installed; map preview disabled")
            placeholder = QtWidgets.QLabel("Map preview unavailable")
            placeholder.setAlignment(QtCore.Qt.AlignCenter)
            return placeholder, NullSurface()
        view = QtWebEngineWidgets.QWebEngineView(self)
        return view, LeafletMapSurface(view, self.callbacks, self)

    # --- Status ---
    def _set_ready(self) -> None:
        self._ready_timer.stop()
        self.status_bar.showMessage("Ready.")

    def _set_status(self, message: str, *, timeout: int | None = None) -> None:
        if timeout is None:
            timeout = 3000
        self.status_bar.showMessage(message)
        if timeout <= 0:
            self._ready_timer.stop()
        else:
            self._ready_timer.start(timeout)

    # --- State flow ---
    def _state_changed(self, state: ViewState, transition: Transition) -> None:
        self.adapter.apply(state, transition)
        self._refresh_controls(state)
        count = len(state.markers)
        self._set_status(f"{count} marker{'s' if count != 1 else ''} on the map.")

    def _refresh_controls(self, state: ViewState) -> None:
        self.city_btn.setText(self.controller.next_city_name)
        self.city_btn.setToolTip(f"Fly to {self.controller.next_city_name}")
        btn = self.style_buttons[state.style]
        if not btn.isChecked():
            btn.setChecked(True)
        self.clear_btn.setEnabled(bool(state.markers))

    def _style_clicked(self, button: QtWidgets.QAbstractButton) -> None:
        for style, btn in self.style_buttons.items():
            if btn is button:
                self.controller.set_map_style(style)
                return

    # --- Surface callbacks ---
    def _map_ready(self) -> None:
        self._load_retries = 0
        if self._map_loaded:
            # The page reloaded in place and came back empty.
            self._remount()
        self._map_loaded = True
        self._set_status("Map loaded.")

    def _map_load_failed(self) -> None:
        if self._load_retries >= MAX_LOAD_RETRIES:
            self._set_status("Map failed to load. Check your network connection.", timeout=0)
            return
        self._load_retries += 1
        self._set_status(
            f"Map failed to load, retrying ({self._load_retries}/{MAX_LOAD_RETRIES})…",
            timeout=0,
        )
        QtCore.QTimer.singleShot(self.load_retry_ms, self._reload_map)

    def _reload_map(self) -> None:
        if not isinstance(self.surface, LeafletMapSurface):
            return
        self._map_loaded = False
        self.surface.load()
        self._remount()

    def _remount(self) -> None:
        self.adapter.reset()
        self.adapter.apply(self.controller.snapshot())

    def _marker_clicked(self, marker_id: str) -> None:
        for marker in self.controller.markers:
            if marker.id == marker_id:
                self._set_status(
                    f"Marker at {marker.latitude:.5f}, {marker.longitude:.5f}"
                )
                return

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:
        self.controller.unsubscribe(self._state_changed)
        self.settings.setValue("geometry", self.saveGeometry())
        event.accept()


def main(argv: Optional[Iterable[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Animated map demo")
    ap.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    ap.add_argument("-q", "--quiet", action="store_true", help="Suppress non-error output")
    args, qt_args = ap.parse_known_args(list(argv) if argv is not None else None)

    level = logging.INFO
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    logging.basicConfig(level=level, format="%(message)s")

    app = QtWidgets.QApplication([sys.argv[0], *qt_args])
    from .theme import apply_dark_palette
    apply_dark_palette(app)
    win = AnimatedMapWindow()
    win.show()
    return app.exec_()


if __name__ == "__main__":
    raise SystemExit(main())
