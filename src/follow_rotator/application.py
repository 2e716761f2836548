"""Application wiring for the Follow Rotator overlay."""

from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QApplication

from . import registry
from .codec import TokenCodec
from .engine import RotationEngine
from .models import Configuration, PlatformRegistry
from .overlay import QtScheduler, RotationOverlayWindow
from .resolver import Query, resolve
from .scheduler import Scheduler

_LOGGER = logging.getLogger(__name__)


def resolve_configuration(query: Query) -> Configuration:
    """Resolve ``query`` against the active registry and its defaults."""

    platforms = registry.get_registry()
    defaults = registry.get_defaults()
    codec = TokenCodec(known_platforms=platforms.keys(), default_timing=defaults.timing)
    return resolve(query, codec=codec, defaults=defaults)


class OverlayApplication:
    """Coordinates the resolved configuration, rotation engine and window."""

    def __init__(
        self,
        configuration: Configuration,
        *,
        platforms: Optional[PlatformRegistry] = None,
        scheduler: Optional[Scheduler] = None,
        overlay_window: Optional[RotationOverlayWindow] = None,
        position: Optional[tuple[int, int]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._configuration = configuration
        self._platforms = platforms or registry.get_registry()
        self._overlay_window = overlay_window or RotationOverlayWindow(
            timing=configuration.timing
        )
        self._scheduler = scheduler or QtScheduler()
        self._position = position
        self._logger = logger or _LOGGER

        self._engine = RotationEngine(
            configuration,
            self._platforms,
            self._scheduler,
            listener=self._overlay_window,
            logger=self._logger,
        )
        self._started = False

    @property
    def engine(self) -> RotationEngine:
        return self._engine

    def start(self) -> None:
        """Show the overlay and start rotating."""

        if self._started:
            return
        if self._position is not None:
            self._overlay_window.move(*self._position)
        self._overlay_window.show()
        self._engine.start()
        self._started = True
        self._logger.info(
            "Overlay started with platforms: %s",
            ", ".join(item.platform for item in self._configuration.items),
        )

    def stop(self) -> None:
        """Stop rotating and hide the overlay."""

        if not self._started:
            return
        self._engine.stop()
        self._overlay_window.hide()
        self._started = False
        self._logger.info("Overlay stopped")


def run_overlay(query: Query = "", *, position: Optional[tuple[int, int]] = None) -> int:
    """Bootstrap the Qt application loop and run the overlay until quit."""

    # Ensure Qt uses software OpenGL before QApplication is constructed
    try:
        QApplication.setAttribute(Qt.ApplicationAttribute.AA_UseSoftwareOpenGL, True)
    except AttributeError:
        _LOGGER.debug("Software OpenGL attribute not supported on this platform")

    app = QApplication.instance() or QApplication([])
    application = OverlayApplication(resolve_configuration(query), position=position)
    application.start()
    try:
        return app.exec()
    finally:
        application.stop()
