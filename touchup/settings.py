"""Viewer settings: load/save the small JSON file kept between sessions."""
import json
import logging
import os
from dataclasses import asdict, dataclass
from typing import Optional

from touchup.models import DEFAULT_ZOOM

logger = logging.getLogger(__name__)


def data_dir() -> str:
    """Directory for settings and logs (``TOUCHUP_DATA_DIR`` or ``~/.touchup``)."""
    return os.environ.get("TOUCHUP_DATA_DIR") or os.path.join(os.path.expanduser("~"), ".touchup")


def settings_path() -> str:
    return os.path.join(data_dir(), "settings.json")


@dataclass
class ViewerSettings:
    zoom: float = DEFAULT_ZOOM
    hi_dpr: bool = True        # render at the screen's device pixel ratio
    debug_mode: bool = False   # verbose logging to console and log file
    last_dir: str = ""         # directory of the last opened PDF


def load_settings(path: Optional[str] = None) -> ViewerSettings:
    """Read settings from *path*; missing file or bad values give defaults."""
    path = path or settings_path()
    if not os.path.exists(path):
        return ViewerSettings()
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", path, exc)
        return ViewerSettings()
    if not isinstance(raw, dict):
        return ViewerSettings()
    defaults = ViewerSettings()
    try:
        zoom = float(raw.get("zoom", defaults.zoom))
    except (TypeError, ValueError):
        zoom = defaults.zoom
    return ViewerSettings(
        zoom=zoom if zoom > 0 else defaults.zoom,
        hi_dpr=bool(raw.get("hi_dpr", defaults.hi_dpr)),
        debug_mode=bool(raw.get("debug_mode", defaults.debug_mode)),
        last_dir=str(raw.get("last_dir", defaults.last_dir) or ""),
    )


def save_settings(settings: ViewerSettings, path: Optional[str] = None):
    path = path or settings_path()
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(asdict(settings), f, indent=2)
