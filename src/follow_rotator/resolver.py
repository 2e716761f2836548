"""Resolve the effective overlay configuration from query parameters.

Precedence is a fixed contract:

1. ``t`` (a token) wins outright when it decodes. Every other parameter is
   ignored in that case, even if present.
2. Otherwise ``data`` (a JSON array of ``{platform, text}``) supplies the
   items, and ``hold``/``animIn``/``animOut`` (integers, milliseconds)
   override individual timing fields.
3. Anything that does not resolve falls back to the defaults.

Malformed input never raises out of :func:`resolve`; it is logged and
treated as absent so the overlay always has something to show.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, List, Mapping, Optional, Union
from urllib.parse import parse_qsl, urlsplit

import jsonschema

from .codec import TokenCodec, default_codec
from .errors import BadIntegerError
from .models import Configuration, ResolvedDefaults, RotationItem, build_items
from .schemas import ITEMS_SCHEMA

_LOGGER = logging.getLogger(__name__)

TOKEN_PARAM = "t"
DATA_PARAM = "data"
HOLD_PARAM = "hold"
ANIM_IN_PARAM = "animIn"
ANIM_OUT_PARAM = "animOut"

_INTEGER_RE = re.compile(r"[0-9]{1,12}")

Query = Union[str, Mapping[str, Any]]


def parse_query(query: Query) -> dict:
    """Normalize a query string, URL or mapping to ``{name: first value}``."""

    if isinstance(query, str):
        text = query
        if "://" in text or text.startswith("/"):
            text = urlsplit(text).query
        else:
            text = text.split("#", 1)[0].lstrip("?")
        params: dict = {}
        for name, value in parse_qsl(text, keep_blank_values=True):
            params.setdefault(name, value)
        return params

    params = {}
    for name, value in query.items():
        if isinstance(value, (list, tuple)):
            if not value:
                continue
            value = value[0]
        params[name] = value
    return params


def parse_timing_value(name: str, raw: Optional[str]) -> Optional[int]:
    """Parse one timing parameter; ``None`` when absent.

    Raises:
        BadIntegerError: The value is present but not a non-negative integer.
    """

    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None
    if not _INTEGER_RE.fullmatch(text):
        raise BadIntegerError(f"Parameter {name!r} is not an integer: {raw!r}")
    return int(text)


def parse_data_param(raw: str) -> List[RotationItem]:
    """Parse the ``data`` parameter into rotation items.

    Raises:
        ValueError: The value is not JSON or not an array of
            ``{platform, text}`` objects.
    """

    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError, RecursionError) as exc:
        raise ValueError(f"data is not valid JSON: {exc}") from exc
    try:
        jsonschema.validate(data, ITEMS_SCHEMA)
    except jsonschema.ValidationError as exc:
        raise ValueError(
            f"data rejected by '{exc.validator}' at {exc.json_path}"
        ) from exc
    return build_items((entry["platform"], entry["text"]) for entry in data)


def _safe_timing(params: Mapping[str, Any], name: str) -> Optional[int]:
    try:
        return parse_timing_value(name, params.get(name))
    except BadIntegerError as exc:
        _LOGGER.warning("Ignoring timing parameter: %s", exc)
        return None


def resolve(
    query: Query,
    *,
    codec: Optional[TokenCodec] = None,
    defaults: Optional[ResolvedDefaults] = None,
) -> Configuration:
    """Return the configuration described by ``query``.

    Args:
        query: Raw query string (``"?t=..."``), full URL, or mapping of
            parameter names to values.
        codec: Codec used for the ``t`` parameter. Defaults to the built-in
            codec over the known platforms.
        defaults: Fallback items and timing.
    """

    codec = codec or default_codec()
    defaults = defaults or ResolvedDefaults()
    params = parse_query(query)

    token = params.get(TOKEN_PARAM)
    if token:
        configuration = codec.try_decode_any(token)
        if configuration is not None:
            _LOGGER.debug("Configuration resolved from token")
            return configuration
        _LOGGER.warning("Invalid token; falling back to discrete parameters")

    items: List[RotationItem] = []
    data = params.get(DATA_PARAM)
    if data:
        try:
            items = parse_data_param(data)
        except ValueError as exc:
            _LOGGER.warning("Failed to parse data param: %s", exc)

    timing = defaults.timing.merged(
        hold_ms=_safe_timing(params, HOLD_PARAM),
        anim_in_ms=_safe_timing(params, ANIM_IN_PARAM),
        anim_out_ms=_safe_timing(params, ANIM_OUT_PARAM),
    )

    if not items:
        _LOGGER.debug("No items in query; using %d default items", len(defaults.items))
        items = list(defaults.items)

    return Configuration(items=tuple(items), timing=timing)
