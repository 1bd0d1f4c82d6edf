from __future__ import annotations
import json
import logging
from typing import Any, Dict, List, Sequence

from PyQt5 import QtCore

try:
    from PyQt5 import QtWebEngineWidgets
except Exception:
    QtWebEngineWidgets = None

try:
    from PyQt5.QtWebChannel import QWebChannel
except Exception:
    QWebChannel = None

from .state import MapStyle, Viewport
from .surface import Annotation, Matrix4, SurfaceCallbacks, to_css_matrix3d

BASE_URL = "https://animated-map.local/"

TILE_SOURCES: Dict[MapStyle, Dict[str, Any]] = {
    MapStyle.STANDARD: {
        "url": "https://{s}.basemaps.cartocdn.com/light_all/{z}/{x}/{y}{r}.png",
        "subdomains": "abcd",
        "maxZoom": 19,
        "attribution": "© OpenStreetMap contributors © CARTO",
    },
    MapStyle.SATELLITE: {
        "url": "https://server.arcgisonline.com/ArcGIS/rest/services/World_Imagery/MapServer/tile/{z}/{y}/{x}",
        "maxZoom": 19,
        "attribution": "Tiles © Esri",
    },
}


class MapBridge(QtCore.QObject):
    """Expose map interaction callbacks to Qt."""

    markerClicked = QtCore.pyqtSignal(str)

    @QtCore.pyqtSlot(str)
    def onMarkerClicked(self, marker_id: str) -> None:
        if marker_id:
            self.markerClicked.emit(marker_id)


def build_map_html(bridge: bool = True) -> str:
    """Return the page hosting the Leaflet map and its ``mapSurface`` API."""
    tiles_json = json.dumps(
        {style.value: source for style, source in TILE_SOURCES.items()}
    ).replace("</", "<\\/")

    bridge_script = ""
    if bridge:
        bridge_script = """
          <script src="qrc:///qtwebchannel/qwebchannel.js"></script>
          <script>
            if (typeof qt !== 'undefined' && qt.webChannelTransport) {
              new QWebChannel(qt.webChannelTransport, function(channel) {
                window.bridge = channel.objects.bridge || null;
              });
            }
          </script>
            """

    return f"""
        <!DOCTYPE html>
        <html>
        <head>
          <meta charset="utf-8">
          <meta name="viewport" content="width=device-width, initial-scale=1.0">
          <meta http-equiv="Content-Security-Policy" content="
            default-src 'self' https://unpkg.com;
            img-src 'self' data: https://*.basemaps.cartocdn.com https://server.arcgisonline.com https://unpkg.com;
            style-src 'self' 'unsafe-inline' https://unpkg.com;
            script-src 'self' 'unsafe-inline' https://unpkg.com qrc:;">
          <link
            rel="stylesheet"
            href="https://unpkg.com/leaflet@1.9.4/dist/leaflet.css"
          />
          <style>
            html, body {{
              height: 100%;
              margin: 0;
              background: #1e1e1e;
              overflow: hidden;
            }}
            #map {{
              height: 100%;
              transform-origin: 50% 50%;
            }}
          </style>
        </head>
        <body>
          <div id="map"></div>
          <script
            src="https://unpkg.com/leaflet@1.9.4/dist/leaflet.js"
          ></script>
        {bridge_script}
          <script>
            window.bridge = window.bridge || null;
            const sources = {tiles_json};
            const map = L.map('map', {{ zoomControl: true }});
            const annotations = L.layerGroup().addTo(map);
            const container = document.getElementById('map');
            let tileLayer = null;

            window.mapSurface = {{
              setViewport(south, west, north, east, animated, duration) {{
                const bounds = L.latLngBounds([south, west], [north, east]);
                if (animated) {{
                  map.flyToBounds(bounds, {{ duration: duration, easeLinearity: 0.5 }});
                }} else {{
                  map.fitBounds(bounds, {{ animate: false }});
                }}
              }},
              setStyle(name) {{
                const source = sources[name];
                if (!source) {{
                  return false;
                }}
                if (tileLayer) {{
                  map.removeLayer(tileLayer);
                }}
                const options = Object.assign({{}}, source);
                delete options.url;
                tileLayer = L.tileLayer(source.url, options).addTo(map);
                return true;
              }},
              removeAllAnnotations() {{
                annotations.clearLayers();
              }},
              addAnnotations(items) {{
                items.forEach(a => {{
                  const marker = L.marker([a.lat, a.lon]);
                  marker.bindTooltip(a.lat.toFixed(5) + ', ' + a.lon.toFixed(5));
                  marker.on('click', () => {{
                    if (window.bridge && window.bridge.onMarkerClicked) {{
                      window.bridge.onMarkerClicked(a.id);
                    }}
                  }});
                  annotations.addLayer(marker);
                }});
              }},
              setTransform(css, duration) {{
                container.style.transition = duration > 0
                  ? 'transform ' + duration + 's ease-in-out'
                  : 'none';
                container.style.transform = css;
              }}
            }};
          </script>
        </body>
        </html>
        """


class LeafletMapSurface(QtCore.QObject):
    """Render surface backed by a Leaflet page in a ``QWebEngineView``.

    Calls made before the page has loaded are buffered and replayed in
    order once ``loadFinished`` reports success.
    """

    def __init__(
        self,
        view: Any,
        callbacks: SurfaceCallbacks | None = None,
        parent: QtCore.QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self.view = view
        self.callbacks = callbacks or SurfaceCallbacks()
        self._ready = False
        self._pending: List[str] = []
        self._bridge = MapBridge(self)
        self._bridge.markerClicked.connect(self._marker_clicked)
        self._web_channel = None
        page = view.page()
        if (
            QWebChannel is not None
            and QtWebEngineWidgets is not None
            and isinstance(page, QtWebEngineWidgets.QWebEnginePage)
        ):
            self._web_channel = QWebChannel(page)
            self._web_channel.registerObject("bridge", self._bridge)
            page.setWebChannel(self._web_channel)
        view.loadStarted.connect(self._load_started)
        view.loadFinished.connect(self._load_finished)

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def bridge(self) -> MapBridge:
        return self._bridge

    def pending_scripts(self) -> List[str]:
        return list(self._pending)

    def load(self) -> None:
        """(Re)load the map page.  Anything buffered for the old page is dropped."""
        self._ready = False
        self._pending.clear()
        html = build_map_html(bridge=self._web_channel is not None)
        self.view.setHtml(html, QtCore.QUrl(BASE_URL))

    def _load_started(self) -> None:
        # Any load, including a reload from the view itself, starts from a blank page.
        self._ready = False

    def _load_finished(self, ok: bool) -> None:
        if not ok:
            self._ready = False
            logging.warning("Map page failed to load; %d calls pending", len(self._pending))
            self.callbacks.load_failed()
            return
        self._ready = True
        pending, self._pending = self._pending, []
        for script in pending:
            self._run(script)
        self.callbacks.ready()

    def _marker_clicked(self, marker_id: str) -> None:
        self.callbacks.annotation_clicked(marker_id)

    def _run(self, script: str) -> None:
        if not self._ready:
            self._pending.append(script)
            return
        self.view.page().runJavaScript(script)

    def _call(self, method: str, *args: Any) -> None:
        arg_text = ", ".join(json.dumps(arg) for arg in args)
        self._run(
            f"window.mapSurface && window.mapSurface.{method}({arg_text});"
        )

    # --- RenderSurface ---
    def set_viewport(self, viewport: Viewport, animated: bool, duration: float) -> None:
        south, west, north, east = viewport.bounds()
        self._call("setViewport", south, west, north, east, bool(animated), float(duration))

    def set_style(self, style: MapStyle) -> None:
        self._call("setStyle", style.value)

    def remove_all_annotations(self) -> None:
        self._call("removeAllAnnotations")

    def add_annotations(self, annotations: Sequence[Annotation]) -> None:
        items = [
            {"id": marker_id, "lat": float(lat), "lon": float(lon)}
            for marker_id, lat, lon in annotations
        ]
        self._call("addAnnotations", items)

    def set_transform(self, matrix: Matrix4, duration: float) -> None:
        self._call("setTransform", to_css_matrix3d(matrix), float(duration))
