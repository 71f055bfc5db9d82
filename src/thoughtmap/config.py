"""
Configuration & Constants
=========================
Central registry for layout constants, camera limits, animation timings and
the debug switch.

Why is this file needed?
------------------------
1. The scene, the view and the layout helper must agree on the same spacing
   and zoom bounds; keeping them here avoids magic numbers in three places.
2. Deployment: resource lookup works both from a source checkout and from a
   PyInstaller bundle (sys._MEIPASS).

Exports:
    AppConfig: Dataclass with all tunables; AppConfig.load() reads QSettings.
"""
from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from PySide6.QtCore import QSettings

ORG_ID = "thoughtmap"
APP_ID = "thoughtmap"
VISIBLE_APP_NAME = "ThoughtMap"

DEBUG_ENV_VAR = "THOUGHTMAP_DEBUG"
DEBUG_SETTINGS_KEY = "debug/show_info"


def get_resource_path(relative_path: str) -> str:
    """
    Get absolute path to resource, works for dev and for PyInstaller.
    """
    if hasattr(sys, '_MEIPASS'):
        base_path: str = getattr(sys, '_MEIPASS')
        return os.path.join(base_path, relative_path)

    # config.py is in src/thoughtmap/
    project_root: Path = Path(__file__).parent.parent.parent
    return os.path.join(str(project_root), relative_path)


def _env_flag(name: str) -> bool | None:
    raw = os.environ.get(name)
    if raw is None:
        return None
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class AppConfig:
    """Tunables shared by the scene, the view and the layout helper."""
    # Layout
    node_spacing: float = 150.0
    spiral_angle_step: float = 0.5
    spiral_radius_step: float = 20.0

    # Camera
    min_zoom: float = 0.5
    max_zoom: float = 3.0
    wheel_zoom_base: float = 1.0015

    # Animation
    appear_duration_ms: int = 300
    disappear_duration_ms: int = 200
    appear_start_scale: float = 0.5
    frame_interval_ms: int = 16

    # Sprites
    node_width: float = 140.0
    node_height: float = 56.0

    animations_enabled: bool = True
    show_debug_info: bool = False

    @classmethod
    def load(cls) -> AppConfig:
        """
        Build the configuration from QSettings, letting the environment win.

        THOUGHTMAP_DEBUG=1 turns the FPS / node-count overlay on regardless of
        what the settings file says.
        """
        config = cls()
        settings = QSettings()
        config.show_debug_info = bool(settings.value(DEBUG_SETTINGS_KEY, False, type=bool))
        env_debug = _env_flag(DEBUG_ENV_VAR)
        if env_debug is not None:
            config.show_debug_info = env_debug
        return config


ASSETS_PATH: str = get_resource_path("assets")
APP_ICON_PATH: str = os.path.join(ASSETS_PATH, "thoughtmap.svg")
