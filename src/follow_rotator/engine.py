"""Rotation state machine driving the overlay.

The engine owns the current index and the item on display. It paints item 0
immediately on :meth:`RotationEngine.start`, then every ``cycle_ms``
(``hold + anim_in + anim_out``) it advances to the next item: the exit
animation starts, ``anim_out_ms`` later the content is swapped and the enter
animation starts. The interval is computed once at start.

Presentation is delegated to a :class:`RotationListener`; the engine never
touches widgets itself.
"""

from __future__ import annotations

import enum
import logging
from typing import Optional, Set

from .models import Configuration, Platform, PlatformRegistry, RotationItem
from .scheduler import Scheduler, Timer

_LOGGER = logging.getLogger(__name__)


class RotationState(enum.Enum):
    DISPLAYING = "displaying"
    TRANSITIONING = "transitioning"


class AnimationPhase(enum.Enum):
    ENTER = "enter"
    EXIT = "exit"


class RotationListener:
    """Hooks consumed by the presentation layer.

    Subclasses override whichever hooks they need; the defaults do nothing.
    """

    def on_content(self, item: RotationItem, platform: Platform) -> None:
        """Replace icon, text and call-to-action with ``item``'s data."""

    def on_background(self, platform: Platform) -> None:
        """Restyle the card background for ``platform``."""

    def on_animation(self, phase: AnimationPhase) -> None:
        """Start the enter or exit animation."""


class RotationEngine:
    """Cycle through a configuration's items on an injected scheduler.

    Args:
        configuration: Items and timing; fixed for the lifetime of the engine.
        registry: Read-only platform table. Items whose platform is missing
            from it are skipped visually but still count as a step.
        scheduler: Timer source (Qt timers in the overlay, virtual time in
            tests).
        listener: Presentation hooks. ``None`` uses a no-op listener.
    """

    def __init__(
        self,
        configuration: Configuration,
        registry: PlatformRegistry,
        scheduler: Scheduler,
        *,
        listener: Optional[RotationListener] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._configuration = configuration
        self._registry = registry
        self._scheduler = scheduler
        self._listener = listener or RotationListener()
        self._logger = logger or _LOGGER

        self._index = 0
        self._state = RotationState.DISPLAYING
        self._interval_ms: Optional[int] = None
        self._tick_timer: Optional[Timer] = None
        self._swap_timer: Optional[Timer] = None
        self._warned_platforms: Set[str] = set()

    @property
    def configuration(self) -> Configuration:
        return self._configuration

    @property
    def index(self) -> int:
        return self._index

    @property
    def state(self) -> RotationState:
        return self._state

    @property
    def current_item(self) -> RotationItem:
        return self._configuration.items[self._index]

    @property
    def running(self) -> bool:
        return self._tick_timer is not None

    @property
    def interval_ms(self) -> Optional[int]:
        """Interval between advances, fixed when the engine starts."""

        return self._interval_ms

    def start(self) -> None:
        """Paint the first item and begin the repeating cycle."""

        if self.running:
            return

        self._index = 0
        self._state = RotationState.DISPLAYING
        # Zero timings would otherwise spin; one millisecond matches a browser's clamp.
        self._interval_ms = max(self._configuration.timing.cycle_ms, 1)
        self._tick_timer = self._scheduler.call_repeating(self._interval_ms, self._tick)
        platform = self._lookup(self.current_item)
        if platform is not None:
            self._paint(self.current_item, platform)
        if not self.running:
            return
        self._logger.info(
            "Rotation started with %d items every %d ms",
            len(self._configuration.items),
            self._interval_ms,
        )

    def stop(self) -> None:
        """Cancel every pending timer; no hook fires after this returns."""

        if not self.running:
            return
        if self._tick_timer is not None:
            self._tick_timer.cancel()
            self._tick_timer = None
        self._cancel_swap()
        self._state = RotationState.DISPLAYING
        self._logger.info("Rotation stopped at index %d", self._index)

    def _tick(self) -> None:
        if self._swap_timer is not None:
            # Previous exit is still pending; finish it before the next cycle.
            self._cancel_swap()
            self._swap()
            if not self.running:
                return

        items = self._configuration.items
        self._index = (self._index + 1) % len(items)
        item = items[self._index]
        self._logger.debug("Advancing to index %d (%s)", self._index, item.platform)

        if self._lookup(item) is None:
            return

        self._state = RotationState.TRANSITIONING
        self._listener.on_animation(AnimationPhase.EXIT)
        if not self.running:
            return
        self._swap_timer = self._scheduler.call_later(
            self._configuration.timing.anim_out_ms, self._on_exit_complete
        )

    def _on_exit_complete(self) -> None:
        self._swap_timer = None
        self._swap()

    def _swap(self) -> None:
        item = self.current_item
        platform = self._lookup(item)
        if platform is not None:
            self._paint(item, platform)
        self._state = RotationState.DISPLAYING

    def _paint(self, item: RotationItem, platform: Platform) -> None:
        # Any hook may stop the engine.
        self._listener.on_content(item, platform)
        if not self.running:
            return
        self._listener.on_background(platform)
        if not self.running:
            return
        self._listener.on_animation(AnimationPhase.ENTER)

    def _cancel_swap(self) -> None:
        if self._swap_timer is not None:
            self._swap_timer.cancel()
            self._swap_timer = None

    def _lookup(self, item: RotationItem) -> Optional[Platform]:
        platform = self._registry.get(item.platform)
        if platform is None and item.platform not in self._warned_platforms:
            self._warned_platforms.add(item.platform)
            self._logger.warning(
                "Unknown platform '%s'; skipping its visual update", item.platform
            )
        return platform
