"""PyQt5 front-end for the animated map demo."""
from __future__ import annotations

from animated_map.window import main

if __name__ == "__main__":
    raise SystemExit(main())
