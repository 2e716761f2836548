"""Core data models for the Follow Rotator overlay."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from .errors import EmptyConfigurationError

DEFAULT_HOLD_MS = 9000
DEFAULT_ANIM_IN_MS = 1000
DEFAULT_ANIM_OUT_MS = 1000


@dataclass(frozen=True)
class RotationItem:
    """One ``(platform, text)`` pair shown for a single rotation cycle."""

    platform: str
    text: str


@dataclass(frozen=True)
class TimingConfig:
    """Hold and animation durations, all in milliseconds."""

    hold_ms: int = DEFAULT_HOLD_MS
    anim_in_ms: int = DEFAULT_ANIM_IN_MS
    anim_out_ms: int = DEFAULT_ANIM_OUT_MS

    def __post_init__(self) -> None:
        for name in ("hold_ms", "anim_in_ms", "anim_out_ms"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"{name} must be a non-negative integer, got {value!r}")

    @property
    def cycle_ms(self) -> int:
        """Time between two successive advances of the rotation."""

        return self.hold_ms + self.anim_in_ms + self.anim_out_ms

    def merged(
        self,
        *,
        hold_ms: Optional[int] = None,
        anim_in_ms: Optional[int] = None,
        anim_out_ms: Optional[int] = None,
    ) -> "TimingConfig":
        """Return a copy where only the fields that are not ``None`` change."""

        overrides = {}
        if hold_ms is not None:
            overrides["hold_ms"] = hold_ms
        if anim_in_ms is not None:
            overrides["anim_in_ms"] = anim_in_ms
        if anim_out_ms is not None:
            overrides["anim_out_ms"] = anim_out_ms
        return replace(self, **overrides) if overrides else self


@dataclass(frozen=True)
class Configuration:
    """Ordered rotation items plus timing, ready for the rotation engine."""

    items: Tuple[RotationItem, ...]
    timing: TimingConfig = field(default_factory=TimingConfig)

    def __post_init__(self) -> None:
        # Accept any iterable but always store an immutable tuple.
        object.__setattr__(self, "items", tuple(self.items))
        if not self.items:
            raise EmptyConfigurationError("Configuration needs at least one item")


@dataclass(frozen=True)
class CallToAction:
    """Call-to-action box shown next to the handle (e.g. "Follow")."""

    text: str
    background: str
    text_color: str = "#ffffff"
    icon: Optional[str] = None


@dataclass(frozen=True)
class Platform:
    """Display metadata for one platform in the registry."""

    id: str
    name: str
    icon: str
    background: str
    cta: CallToAction
    text_color: str = "#000000"


class PlatformRegistry(Mapping[str, Platform]):
    """Read-only lookup table from platform id to display metadata.

    Iteration follows the order the platforms were supplied in.
    """

    def __init__(self, platforms: Iterable[Platform]) -> None:
        table: Dict[str, Platform] = {}
        for platform in platforms:
            if platform.id in table:
                raise ValueError(f"Duplicate platform id: {platform.id}")
            table[platform.id] = platform
        self._table = table

    def __getitem__(self, platform_id: str) -> Platform:
        return self._table[platform_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return f"PlatformRegistry({list(self._table)!r})"


def build_items(pairs: Iterable[Tuple[str, str]]) -> List[RotationItem]:
    """Assemble rotation items, trimming text and dropping blank entries."""

    items: List[RotationItem] = []
    for platform, text in pairs:
        cleaned = text.strip()
        if cleaned:
            items.append(RotationItem(platform=platform, text=cleaned))
    return items


DEFAULT_ITEMS: Tuple[RotationItem, ...] = (
    RotationItem(platform="tiktok", text="@nguyennhatlinh.official"),
    RotationItem(platform="discord", text="discord.gg/xunAChFVkc"),
    RotationItem(platform="youtube", text="@chokernguyen"),
)


def default_configuration() -> Configuration:
    """Return the built-in configuration used when nothing else resolves."""

    return Configuration(items=DEFAULT_ITEMS, timing=TimingConfig())


@dataclass(frozen=True)
class ResolvedDefaults:
    """Fallback items and timing used when a query does not override them."""

    items: Tuple[RotationItem, ...] = DEFAULT_ITEMS
    timing: TimingConfig = field(default_factory=TimingConfig)

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))
        if not self.items:
            raise EmptyConfigurationError("Default items must not be empty")
