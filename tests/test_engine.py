from __future__ import annotations

import logging
from typing import List, Tuple

import pytest

from follow_rotator.engine import (
    AnimationPhase,
    RotationEngine,
    RotationListener,
    RotationState,
)
from follow_rotator.models import (
    Configuration,
    Platform,
    PlatformRegistry,
    RotationItem,
    TimingConfig,
)
from follow_rotator.registry import builtin_registry
from follow_rotator.scheduler import VirtualScheduler


class RecordingListener(RotationListener):
    """Records every hook call with the virtual time it happened at."""

    def __init__(self, scheduler: VirtualScheduler) -> None:
        self.scheduler = scheduler
        self.events: List[Tuple[int, str, object]] = []

    def on_content(self, item: RotationItem, platform: Platform) -> None:
        self.events.append((self.scheduler.now_ms, "content", item))

    def on_background(self, platform: Platform) -> None:
        self.events.append((self.scheduler.now_ms, "background", platform.id))

    def on_animation(self, phase: AnimationPhase) -> None:
        self.events.append((self.scheduler.now_ms, "animation", phase))

    def swaps(self) -> List[Tuple[int, RotationItem]]:
        return [(t, item) for t, kind, item in self.events if kind == "content"]


def _config(*platforms: str, hold=9000, anim_in=1000, anim_out=1000) -> Configuration:
    return Configuration(
        items=tuple(RotationItem(p, f"@{p}") for p in platforms),
        timing=TimingConfig(hold_ms=hold, anim_in_ms=anim_in, anim_out_ms=anim_out),
    )


@pytest.fixture()
def scheduler() -> VirtualScheduler:
    return VirtualScheduler()


@pytest.fixture()
def listener(scheduler: VirtualScheduler) -> RecordingListener:
    return RecordingListener(scheduler)


@pytest.fixture()
def platforms() -> PlatformRegistry:
    return builtin_registry()


def test_start_paints_first_item_without_exit(scheduler, listener, platforms) -> None:
    engine = RotationEngine(
        _config("tiktok", "discord"), platforms, scheduler, listener=listener
    )

    engine.start()

    assert listener.events == [
        (0, "content", RotationItem("tiktok", "@tiktok")),
        (0, "background", "tiktok"),
        (0, "animation", AnimationPhase.ENTER),
    ]
    assert engine.index == 0
    assert engine.state is RotationState.DISPLAYING
    assert engine.interval_ms == 11000


def test_three_items_rotate_with_fixed_interval(scheduler, listener, platforms) -> None:
    engine = RotationEngine(
        _config("tiktok", "discord", "youtube"), platforms, scheduler, listener=listener
    )
    engine.start()
    listener.events.clear()

    scheduler.advance(11000 * 7 + 1000)

    swaps = listener.swaps()
    times = [t for t, _ in swaps]
    order = [item.platform for _, item in swaps]
    assert order == ["discord", "youtube", "tiktok"] * 2 + ["discord"]
    assert times[0] == 12000
    assert all(b - a == 11000 for a, b in zip(times, times[1:]))


def test_exit_precedes_swap_and_enter_follows(scheduler, listener, platforms) -> None:
    engine = RotationEngine(
        _config("tiktok", "discord"), platforms, scheduler, listener=listener
    )
    engine.start()
    listener.events.clear()

    scheduler.advance(11000)
    assert engine.index == 1
    assert engine.state is RotationState.TRANSITIONING
    assert listener.events == [(11000, "animation", AnimationPhase.EXIT)]

    scheduler.advance(999)
    assert len(listener.events) == 1

    scheduler.advance(1)
    assert engine.state is RotationState.DISPLAYING
    assert [kind for _, kind, _ in listener.events] == [
        "animation",
        "content",
        "background",
        "animation",
    ]
    assert listener.events[-1] == (12000, "animation", AnimationPhase.ENTER)


def test_single_item_still_runs_full_cycle(scheduler, listener, platforms) -> None:
    engine = RotationEngine(_config("x"), platforms, scheduler, listener=listener)
    engine.start()
    listener.events.clear()

    scheduler.advance(22000)

    phases = [e for _, kind, e in listener.events if kind == "animation"]
    assert phases == [
        AnimationPhase.EXIT,
        AnimationPhase.ENTER,
        AnimationPhase.EXIT,
    ]
    assert engine.index == 0
    assert [item.platform for _, item in listener.swaps()] == ["x"]


def test_unknown_platform_is_skipped_but_index_advances(
    scheduler, listener, platforms, caplog: pytest.LogCaptureFixture
) -> None:
    engine = RotationEngine(
        _config("tiktok", "mastodon", "youtube"),
        platforms,
        scheduler,
        listener=listener,
    )
    engine.start()
    listener.events.clear()

    with caplog.at_level(logging.WARNING):
        scheduler.advance(11000)
        assert engine.index == 1
        assert engine.state is RotationState.DISPLAYING
        assert listener.events == []

        scheduler.advance(11000)
        assert engine.index == 2
        scheduler.advance(11000 * 3 + 1000)

    swapped = [item.platform for _, item in listener.swaps()]
    assert swapped == ["youtube", "tiktok", "youtube"]
    assert caplog.text.count("Unknown platform 'mastodon'") == 1


def test_unknown_first_platform_skips_initial_paint(
    scheduler, listener, platforms
) -> None:
    engine = RotationEngine(
        _config("mastodon", "x"), platforms, scheduler, listener=listener
    )

    engine.start()
    assert listener.events == []
    assert engine.running is True

    scheduler.advance(12000)
    assert [item.platform for _, item in listener.swaps()] == ["x"]


def test_stop_cancels_pending_swap(scheduler, listener, platforms) -> None:
    engine = RotationEngine(
        _config("tiktok", "discord"), platforms, scheduler, listener=listener
    )
    engine.start()
    scheduler.advance(11500)
    count = len(listener.events)

    engine.stop()
    scheduler.advance(100_000)

    assert len(listener.events) == count
    assert scheduler.pending() == 0
    assert engine.running is False
    assert engine.state is RotationState.DISPLAYING


def test_stop_from_exit_hook_prevents_swap(scheduler, platforms) -> None:
    class StoppingListener(RecordingListener):
        engine: RotationEngine

        def on_animation(self, phase: AnimationPhase) -> None:
            super().on_animation(phase)
            if phase is AnimationPhase.EXIT:
                self.engine.stop()

    listener = StoppingListener(scheduler)
    engine = RotationEngine(
        _config("tiktok", "discord"), platforms, scheduler, listener=listener
    )
    listener.engine = engine
    engine.start()

    scheduler.advance(50_000)

    assert [item.platform for _, item in listener.swaps()] == ["tiktok"]
    assert scheduler.pending() == 0


def test_stop_from_content_hook_silences_the_rest_of_the_swap(
    scheduler, platforms
) -> None:
    class StoppingListener(RecordingListener):
        engine: RotationEngine

        def on_content(self, item: RotationItem, platform: Platform) -> None:
            super().on_content(item, platform)
            if item.platform == "discord":
                self.engine.stop()

    listener = StoppingListener(scheduler)
    engine = RotationEngine(
        _config("tiktok", "discord"), platforms, scheduler, listener=listener
    )
    listener.engine = engine
    engine.start()
    listener.events.clear()

    scheduler.advance(50_000)

    assert listener.events == [
        (11000, "animation", AnimationPhase.EXIT),
        (12000, "content", RotationItem("discord", "@discord")),
    ]
    assert engine.running is False
    assert scheduler.pending() == 0


def test_stop_during_initial_paint(scheduler, platforms) -> None:
    class StoppingListener(RecordingListener):
        engine: RotationEngine

        def on_background(self, platform: Platform) -> None:
            super().on_background(platform)
            self.engine.stop()

    listener = StoppingListener(scheduler)
    engine = RotationEngine(_config("x"), platforms, scheduler, listener=listener)
    listener.engine = engine

    engine.start()
    scheduler.advance(50_000)

    assert [kind for _, kind, _ in listener.events] == ["content", "background"]
    assert engine.running is False
    assert scheduler.pending() == 0


def test_start_and_stop_are_idempotent(scheduler, listener, platforms) -> None:
    engine = RotationEngine(_config("x"), platforms, scheduler, listener=listener)

    engine.stop()
    engine.start()
    engine.start()

    assert scheduler.pending() == 1
    assert len(listener.swaps()) == 1
    engine.stop()
    engine.stop()
    assert scheduler.pending() == 0


def test_zero_timing_uses_minimum_interval(scheduler, listener, platforms) -> None:
    engine = RotationEngine(
        _config("tiktok", "discord", hold=0, anim_in=0, anim_out=0),
        platforms,
        scheduler,
        listener=listener,
    )
    engine.start()

    scheduler.advance(3)

    assert engine.interval_ms == 1
    assert [item.platform for _, item in listener.swaps()] == [
        "tiktok",
        "discord",
        "tiktok",
        "discord",
    ]


def test_slow_exit_is_flushed_before_next_cycle(scheduler, listener, platforms) -> None:
    # hold=0, anim_in=0: the exit lasts as long as the whole interval.
    engine = RotationEngine(
        _config("tiktok", "discord", "youtube", hold=0, anim_in=0, anim_out=1000),
        platforms,
        scheduler,
        listener=listener,
    )
    engine.start()
    listener.events.clear()

    scheduler.advance(5000)

    kinds = [
        (kind, value)
        for _, kind, value in listener.events
        if kind == "content" or value is AnimationPhase.EXIT
    ]
    for first, second in zip(kinds, kinds[1:]):
        assert not (first[0] == "animation" and second[0] == "animation")
    assert [item.platform for _, item in listener.swaps()][:3] == [
        "discord",
        "youtube",
        "tiktok",
    ]


def test_default_listener_is_a_no_op(scheduler, platforms) -> None:
    engine = RotationEngine(_config("tiktok", "x"), platforms, scheduler)
    engine.start()

    scheduler.advance(30_000)

    assert engine.index == 0
    assert engine.current_item == RotationItem("tiktok", "@tiktok")


def test_virtual_scheduler_orders_same_time_callbacks() -> None:
    scheduler = VirtualScheduler()
    fired: List[str] = []

    scheduler.call_later(10, lambda: fired.append("a"))
    scheduler.call_later(10, lambda: fired.append("b"))
    cancelled = scheduler.call_later(5, lambda: fired.append("never"))
    cancelled.cancel()
    scheduler.call_later(0, lambda: scheduler.call_later(10, lambda: fired.append("c")))

    scheduler.advance(10)

    assert fired == ["a", "b", "c"]
    assert scheduler.now_ms == 10


def test_virtual_scheduler_rejects_bad_values() -> None:
    scheduler = VirtualScheduler()

    with pytest.raises(ValueError):
        scheduler.call_repeating(0, lambda: None)
    with pytest.raises(ValueError):
        scheduler.call_later(-1, lambda: None)
    with pytest.raises(ValueError):
        scheduler.advance(-1)
