"""Qt presentation layer for the rotating overlay.

This module provides :class:`RotationOverlayWindow`, a frameless, translucent
card showing a platform icon, the handle text and a call-to-action box, and
:class:`QtScheduler`, which backs the rotation engine with ``QTimer``s so
every transition runs on the Qt main thread.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional, Set

from PySide6.QtCore import (
    QAbstractAnimation,
    QEasingCurve,
    QPropertyAnimation,
    Qt,
    QTimer,
)
from PySide6.QtGui import QPixmap
from PySide6.QtWidgets import (
    QFrame,
    QGraphicsOpacityEffect,
    QHBoxLayout,
    QLabel,
    QWidget,
)

from .engine import AnimationPhase
from .models import Platform, RotationItem, TimingConfig
from .registry import resolve_asset

_LOGGER = logging.getLogger(__name__)

ICON_SIZE = 32
CTA_ICON_SIZE = 16


class QtTimer:
    """Cancellable handle around a ``QTimer``."""

    def __init__(
        self,
        interval_ms: int,
        callback: Callable[[], None],
        *,
        single_shot: bool,
        parent=None,
        on_finished: Optional[Callable[["QtTimer"], None]] = None,
    ) -> None:
        self._callback = callback
        self._single_shot = single_shot
        self._on_finished = on_finished
        self._timer = QTimer(parent)
        self._timer.setSingleShot(single_shot)
        self._timer.setTimerType(Qt.TimerType.PreciseTimer)
        self._timer.timeout.connect(self._fire)
        self._timer.start(interval_ms)

    def is_active(self) -> bool:
        return self._timer.isActive()

    def cancel(self) -> None:
        self._timer.stop()
        self._finish()

    def _fire(self) -> None:
        if self._single_shot:
            self._finish()
        self._callback()

    def _finish(self) -> None:
        if self._on_finished is not None:
            self._on_finished(self)
            self._on_finished = None


class QtScheduler:
    """Scheduler backed by Qt timers; requires a running Qt event loop.

    The scheduler holds a reference to every armed timer so a handle the
    caller drops is not collected before it fires.
    """

    def __init__(self, parent=None) -> None:
        self._parent = parent
        self._active: Set[QtTimer] = set()

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> QtTimer:
        return self._arm(delay_ms, callback, single_shot=True)

    def call_repeating(
        self, interval_ms: int, callback: Callable[[], None]
    ) -> QtTimer:
        return self._arm(interval_ms, callback, single_shot=False)

    def pending(self) -> int:
        return len(self._active)

    def _arm(
        self, interval_ms: int, callback: Callable[[], None], *, single_shot: bool
    ) -> QtTimer:
        timer = QtTimer(
            interval_ms,
            callback,
            single_shot=single_shot,
            parent=self._parent,
            on_finished=self._active.discard,
        )
        self._active.add(timer)
        return timer


class RotationOverlayWindow(QWidget):
    """Frameless card that renders the rotation engine's hooks.

    The card keeps its child labels for the whole run; content updates only
    swap pixmaps, text and style sheets. Enter and exit animations fade a
    ``QGraphicsOpacityEffect`` on the card.

    Args:
        timing: Durations for the enter and exit fades.
        parent: Optional parent widget.
    """

    def __init__(
        self,
        *,
        timing: Optional[TimingConfig] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._timing = timing or TimingConfig()

        self._card = QFrame(self)
        self._card.setObjectName("card")
        self._icon = QLabel(self._card)
        self._icon.setFixedSize(ICON_SIZE, ICON_SIZE)
        self._text = QLabel(self._card)
        self._cta_box = QFrame(self._card)
        self._cta_box.setObjectName("ctaBox")
        self._cta_text = QLabel(self._cta_box)
        self._cta_icon = QLabel(self._cta_box)
        self._cta_icon.setFixedSize(CTA_ICON_SIZE, CTA_ICON_SIZE)

        cta_layout = QHBoxLayout(self._cta_box)
        cta_layout.setContentsMargins(12, 6, 12, 6)
        cta_layout.setSpacing(8)
        cta_layout.addWidget(self._cta_text)
        cta_layout.addWidget(self._cta_icon)

        card_layout = QHBoxLayout(self._card)
        card_layout.setContentsMargins(8, 4, 8, 4)
        card_layout.setSpacing(8)
        card_layout.addWidget(self._icon)
        card_layout.addWidget(self._text)
        card_layout.addStretch(1)
        card_layout.addWidget(self._cta_box)

        outer = QHBoxLayout(self)
        outer.setContentsMargins(0, 0, 0, 0)
        outer.addWidget(self._card)

        self._opacity = QGraphicsOpacityEffect(self._card)
        self._opacity.setOpacity(0.0)
        self._card.setGraphicsEffect(self._opacity)
        self._animation = QPropertyAnimation(self._opacity, b"opacity", self)

        self._icon_path: Optional[Path] = None
        self._phase: Optional[AnimationPhase] = None

        self._configure_window_flags()

    # -- engine hooks ----------------------------------------------------

    def on_content(self, item: RotationItem, platform: Platform) -> None:
        self._icon_path = self._set_icon(self._icon, platform.icon, ICON_SIZE)
        self._text.setText(item.text)
        self._cta_text.setText(platform.cta.text)
        if platform.cta.icon:
            self._set_icon(self._cta_icon, platform.cta.icon, CTA_ICON_SIZE)
        else:
            self._cta_icon.clear()
        self._cta_box.setStyleSheet(
            f"QFrame#ctaBox {{ background: {platform.cta.background};"
            " border-radius: 6px; }"
            f" QLabel {{ color: {platform.cta.text_color}; font-weight: 500; }}"
        )

    def on_background(self, platform: Platform) -> None:
        self._card.setStyleSheet(
            f"QFrame#card {{ background: {platform.background};"
            " border-radius: 6px; }"
            f" QLabel {{ color: {platform.text_color}; }}"
        )

    def on_animation(self, phase: AnimationPhase) -> None:
        self._phase = phase
        self._animation.stop()
        if phase is AnimationPhase.ENTER:
            self._animation.setDuration(self._timing.anim_in_ms)
            self._animation.setStartValue(self._opacity.opacity())
            self._animation.setEndValue(1.0)
            self._animation.setEasingCurve(QEasingCurve.Type.OutBack)
        else:
            self._animation.setDuration(self._timing.anim_out_ms)
            self._animation.setStartValue(self._opacity.opacity())
            self._animation.setEndValue(0.0)
            self._animation.setEasingCurve(QEasingCurve.Type.InBack)
        self._animation.start()

    # -- inspection ------------------------------------------------------

    def text(self) -> str:
        return self._text.text()

    def cta_text(self) -> str:
        return self._cta_text.text()

    def card_style(self) -> str:
        return self._card.styleSheet()

    def cta_style(self) -> str:
        return self._cta_box.styleSheet()

    def icon_path(self) -> Optional[Path]:
        """Path of the icon currently shown, or ``None`` when it failed to load."""

        return self._icon_path

    def phase(self) -> Optional[AnimationPhase]:
        return self._phase

    def is_animating(self) -> bool:
        return self._animation.state() == QAbstractAnimation.State.Running

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self._animation.stop()
        super().closeEvent(event)

    # -- helpers ---------------------------------------------------------

    def _configure_window_flags(self) -> None:
        self.setWindowFlags(
            Qt.WindowType.FramelessWindowHint
            | Qt.WindowType.WindowStaysOnTopHint
            | Qt.WindowType.Tool
        )
        self.setAttribute(Qt.WidgetAttribute.WA_TranslucentBackground, True)
        self.setAttribute(Qt.WidgetAttribute.WA_NoSystemBackground, True)

    def _set_icon(self, label: QLabel, relative: str, size: int) -> Optional[Path]:
        path = resolve_asset(relative)
        if not path.is_file():
            _LOGGER.warning("Overlay icon missing or not a file: %s", path)
            label.clear()
            return None

        pixmap = QPixmap(path.as_posix())
        if pixmap.isNull():
            _LOGGER.warning("Overlay icon failed to load: %s", path)
            label.clear()
            return None

        label.setPixmap(
            pixmap.scaled(
                size,
                size,
                Qt.AspectRatioMode.KeepAspectRatio,
                Qt.TransformationMode.SmoothTransformation,
            )
        )
        return path
