# theme.py
from PyQt5 import QtCore, QtGui, QtWidgets

# Accent colours for the map control buttons, matched by objectName.
ROLE_COLOURS = {
    "flipButton": "#007acc",
    "cityButton": "#007acc",
    "addMarkerButton": "#2e9d52",
    "clearButton": "#c74e39",
}


def apply_dark_palette(app: QtWidgets.QApplication) -> None:
    """Apply the dark theme used around the map."""
    app.setStyle("Fusion")
    app.setAttribute(QtCore.Qt.AA_UseHighDpiPixmaps, True)

    # Backgrounds: #1e1e1e (window), #252526 (base), #2d2d30 (alternate)
    # Accent: #007acc, text: #d4d4d4, disabled: #858585
    palette = QtGui.QPalette()
    palette.setColor(QtGui.QPalette.Window, QtGui.QColor("#1e1e1e"))
    palette.setColor(QtGui.QPalette.WindowText, QtGui.QColor("#d4d4d4"))
    palette.setColor(QtGui.QPalette.Base, QtGui.QColor("#252526"))
    palette.setColor(QtGui.QPalette.AlternateBase, QtGui.QColor("#2d2d30"))
    palette.setColor(QtGui.QPalette.ToolTipBase, QtGui.QColor("#2d2d30"))
    palette.setColor(QtGui.QPalette.ToolTipText, QtGui.QColor("#d4d4d4"))
    palette.setColor(QtGui.QPalette.Text, QtGui.QColor("#d4d4d4"))
    palette.setColor(QtGui.QPalette.Button, QtGui.QColor("#3e3e42"))
    palette.setColor(QtGui.QPalette.ButtonText, QtGui.QColor("#d4d4d4"))
    palette.setColor(QtGui.QPalette.Highlight, QtGui.QColor("#007acc"))
    palette.setColor(QtGui.QPalette.HighlightedText, QtGui.QColor("#ffffff"))
    palette.setColor(QtGui.QPalette.Disabled, QtGui.QPalette.ButtonText, QtGui.QColor("#858585"))
    app.setPalette(palette)
    app.setStyleSheet(map_control_styles())


def _tinted(colour: str, alpha: float) -> str:
    c = QtGui.QColor(colour)
    return f"rgba({c.red()},{c.green()},{c.blue()},{alpha})"


def map_control_styles() -> str:
    """QSS for the control bars above and below the map."""
    qss = """
    * {
        font-family: "Segoe UI", Roboto, "Helvetica Neue", Arial, sans-serif;
        font-size: 10pt;
    }
    QWidget { color: #d4d4d4; }
    #controlBar { background-color: #252526; }

    /* Segmented style selector */
    #styleSegment QPushButton {
        background-color: #2d2d30;
        border: 1px solid #3e3e42;
        padding: 5px 15px;
        border-radius: 0px;
    }
    #styleSegment QPushButton#styleStandard {
        border-top-left-radius: 4px;
        border-bottom-left-radius: 4px;
    }
    #styleSegment QPushButton#styleSatellite {
        border-top-right-radius: 4px;
        border-bottom-right-radius: 4px;
    }
    #styleSegment QPushButton:checked {
        background-color: #007acc;
        border: 1px solid #007acc;
        color: #ffffff;
    }

    QPushButton {
        border-radius: 8px;
        padding: 6px 14px;
    }
    QStatusBar { background: #252526; border-top: 1px solid #3e3e42; color: #d4d4d4; }
    """
    for name, colour in ROLE_COLOURS.items():
        qss += f"""
    QPushButton#{name} {{
        background-color: {_tinted(colour, 0.2)};
        border: 1px solid {_tinted(colour, 0.45)};
    }}
    QPushButton#{name}:hover {{ background-color: {_tinted(colour, 0.35)}; }}
    QPushButton#{name}:pressed {{ background-color: {colour}; color: #ffffff; }}
    """
    return qss
