"""Settings-editor logic for building and loading shareable overlay links.

This is the widget-free part of the editor: turning form values into a
configuration, producing the ``?t=<token>`` link and comparing it with the
equivalent discrete-parameter URL, and loading a pasted token back into
form values.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple, Union
from urllib.parse import urlencode

from .codec import TokenCodec, default_codec
from .errors import DecodeError, ShareError
from .models import Configuration, TimingConfig, build_items
from .resolver import ANIM_IN_PARAM, ANIM_OUT_PARAM, DATA_PARAM, HOLD_PARAM, TOKEN_PARAM

_LOGGER = logging.getLogger(__name__)

NO_PLATFORM_MESSAGE = "Please select at least one platform!"
NO_TOKEN_MESSAGE = "Please enter a token!"
INVALID_TOKEN_MESSAGE = "Invalid token format!"

Seconds = Union[int, float]


@dataclass(frozen=True)
class EditorValues:
    """Form values of the settings editor."""

    selections: Tuple[Tuple[str, str], ...]
    hold_seconds: float
    anim_in_ms: int
    anim_out_ms: int


@dataclass(frozen=True)
class ShareLink:
    """A generated overlay link plus its size comparison."""

    url: str
    token: str
    full_url: str

    @property
    def savings(self) -> int:
        """Characters saved compared with the discrete-parameter URL."""

        return len(self.full_url) - len(self.url)

    @property
    def savings_percent(self) -> int:
        if not self.full_url:
            return 0
        return int(math.floor(self.savings / len(self.full_url) * 100 + 0.5))


def build_configuration(
    selections: Iterable[Tuple[str, str]],
    *,
    hold_seconds: Seconds,
    anim_in_ms: int,
    anim_out_ms: int,
) -> Configuration:
    """Turn editor form values into a configuration.

    ``hold_seconds`` is entered in seconds and stored in milliseconds.

    Raises:
        ShareError: No selection has text, or a timing value is negative.
    """

    items = build_items(selections)
    if not items:
        raise ShareError(NO_PLATFORM_MESSAGE)
    try:
        timing = TimingConfig(
            hold_ms=int(round(hold_seconds * 1000)),
            anim_in_ms=int(anim_in_ms),
            anim_out_ms=int(anim_out_ms),
        )
    except ValueError as exc:
        raise ShareError(f"Invalid timing: {exc}") from exc
    return Configuration(items=tuple(items), timing=timing)


def editor_values(configuration: Configuration) -> EditorValues:
    """Map a configuration back onto editor form values."""

    timing = configuration.timing
    return EditorValues(
        selections=tuple((item.platform, item.text) for item in configuration.items),
        hold_seconds=timing.hold_ms / 1000,
        anim_in_ms=timing.anim_in_ms,
        anim_out_ms=timing.anim_out_ms,
    )


def base_url(origin: str, path: str = "/") -> str:
    """Return ``<origin>/<first path segment>`` (the overlay's root)."""

    segments = path.split("/")
    first = segments[1] if len(segments) > 1 else ""
    return f"{origin.rstrip('/')}/{first}"


def full_url(configuration: Configuration, origin: str, path: str = "/") -> str:
    """Build the discrete-parameter URL (``data``, ``hold``, ``animIn``, ``animOut``)."""

    timing = configuration.timing
    data = json.dumps(
        [{"platform": i.platform, "text": i.text} for i in configuration.items],
        separators=(",", ":"),
        ensure_ascii=False,
    )
    query = urlencode(
        [
            (DATA_PARAM, data),
            (HOLD_PARAM, timing.hold_ms),
            (ANIM_IN_PARAM, timing.anim_in_ms),
            (ANIM_OUT_PARAM, timing.anim_out_ms),
        ]
    )
    return f"{base_url(origin, path)}?{query}"


def build_share_link(
    configuration: Configuration,
    origin: str,
    path: str = "/",
    *,
    compact: bool = False,
    codec: Optional[TokenCodec] = None,
) -> ShareLink:
    """Encode ``configuration`` and build the ``?t=<token>`` overlay link."""

    codec = codec or default_codec()
    token = codec.compress(configuration) if compact else codec.encode(configuration)
    link = ShareLink(
        url=f"{base_url(origin, path)}?{TOKEN_PARAM}={token}",
        token=token,
        full_url=full_url(configuration, origin, path),
    )
    _LOGGER.info(
        "Generated %s token of %d characters (saved %d characters)",
        "compact" if compact else "full",
        len(token),
        link.savings,
    )
    return link


def preview_url(
    configuration: Configuration, *, codec: Optional[TokenCodec] = None
) -> str:
    """Relative URL the editor's live preview loads (one level up)."""

    codec = codec or default_codec()
    return f"../?{TOKEN_PARAM}={codec.encode(configuration)}"


def load_token(text: str, *, codec: Optional[TokenCodec] = None) -> Configuration:
    """Decode a token pasted into the editor.

    Raises:
        ShareError: The input is blank or is not a valid token.
    """

    token = (text or "").strip()
    if not token:
        raise ShareError(NO_TOKEN_MESSAGE)
    codec = codec or default_codec()
    try:
        return codec.decode_any(token)
    except DecodeError as exc:
        _LOGGER.warning("Rejected pasted token: %s", exc)
        raise ShareError(INVALID_TOKEN_MESSAGE) from exc
