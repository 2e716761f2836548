"""URL-safe token codec for rotation configurations.

A token is the JSON form of a :class:`~follow_rotator.models.Configuration`
encoded with the URL-safe base64 alphabet and with its ``=`` padding
stripped, so it can be dropped into a query string unmodified.

Two payload shapes exist:

* the full form, ``{"platforms": [{"platform", "text"}], "holdTime",
  "animInTime", "animOutTime"}``;
* the compact form, ``{"p": [{"t", "v"}], "h", "i", "o"}``, where ``t`` is
  a fixed short platform code. It is never longer than the full form.

Key order is fixed on the wire so the same configuration always produces
the same token.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any, Dict, Iterable, Mapping, Optional

import jsonschema

from .errors import DecodeError, InvalidSchemaError, MalformedTokenError
from .models import Configuration, TimingConfig, build_items
from .schemas import COMPACT_TOKEN_SCHEMA, TOKEN_SCHEMA

_LOGGER = logging.getLogger(__name__)

# Stable across versions: new platforms get new codes, existing ones never change.
PLATFORM_CODES: Dict[str, str] = {
    "tiktok": "ti",
    "discord": "di",
    "youtube": "yo",
    "twitch": "tw",
    "facebook": "fa",
    "instagram": "in",
    "x": "x",
}
CODE_PLATFORMS: Dict[str, str] = {code: pid for pid, code in PLATFORM_CODES.items()}

_JSON_SEPARATORS = (",", ":")


def _to_token(payload: Mapping[str, Any]) -> str:
    raw = json.dumps(payload, separators=_JSON_SEPARATORS, ensure_ascii=False)
    encoded = base64.b64encode(raw.encode("utf-8")).decode("ascii")
    return encoded.replace("+", "-").replace("/", "_").rstrip("=")


def _from_token(token: Any) -> Any:
    if not isinstance(token, str):
        raise MalformedTokenError(f"Token must be a string, got {type(token).__name__}")

    standard = token.replace("-", "+").replace("_", "/")
    standard += "=" * (-len(standard) % 4)
    try:
        raw = base64.b64decode(standard, validate=True)
        text = raw.decode("utf-8")
        return json.loads(text)
    except (binascii.Error, ValueError, RecursionError) as exc:
        # json.JSONDecodeError and UnicodeDecodeError are both ValueErrors.
        raise MalformedTokenError(f"Token is not valid base64 JSON: {exc}") from exc


def _validate(payload: Any, schema: Mapping[str, Any]) -> None:
    try:
        jsonschema.validate(payload, schema)
    except jsonschema.ValidationError as exc:
        raise InvalidSchemaError(
            f"Token payload rejected by '{exc.validator}' at {exc.json_path}"
        ) from exc


def _optional_int(payload: Mapping[str, Any], key: str) -> Optional[int]:
    value = payload.get(key)
    return None if value is None else int(value)


class TokenCodec:
    """Encode and decode configurations as URL-safe tokens.

    Args:
        known_platforms: Platform ids accepted by :meth:`decode`. Defaults to
            the ids of the built-in short-code table.
        strict_codes: When ``True``, :meth:`decompress` rejects short codes
            it does not know instead of passing them through verbatim.
        default_timing: Timing used for fields missing from a payload.
    """

    def __init__(
        self,
        known_platforms: Optional[Iterable[str]] = None,
        *,
        strict_codes: bool = False,
        default_timing: Optional[TimingConfig] = None,
    ) -> None:
        self._known = frozenset(
            PLATFORM_CODES if known_platforms is None else known_platforms
        )
        self._strict_codes = strict_codes
        self._default_timing = default_timing or TimingConfig()

    @property
    def known_platforms(self) -> frozenset:
        return self._known

    @property
    def strict_codes(self) -> bool:
        return self._strict_codes

    # -- full form -------------------------------------------------------

    def encode(self, configuration: Configuration) -> str:
        """Serialize ``configuration`` to a full-form token."""

        timing = configuration.timing
        payload = {
            "platforms": [
                {"platform": item.platform, "text": item.text}
                for item in configuration.items
            ],
            "holdTime": timing.hold_ms,
            "animInTime": timing.anim_in_ms,
            "animOutTime": timing.anim_out_ms,
        }
        return _to_token(payload)

    def decode(self, token: str) -> Configuration:
        """Parse a full-form token.

        Raises:
            MalformedTokenError: The token is not base64-encoded JSON.
            InvalidSchemaError: The JSON lacks a usable platform list.
        """

        return self._hydrate_full(_from_token(token))

    def try_decode(self, token: str) -> Optional[Configuration]:
        """Like :meth:`decode` but return ``None`` instead of raising."""

        try:
            return self.decode(token)
        except DecodeError as exc:
            _LOGGER.warning("Token decode error: %s", exc)
            return None

    def is_valid(self, token: Any) -> bool:
        """Return ``True`` when ``token`` decodes to a non-empty platform list."""

        if not isinstance(token, str) or not token:
            return False
        try:
            self.decode(token)
        except DecodeError:
            return False
        return True

    # -- compact form ----------------------------------------------------

    def compress(self, configuration: Configuration) -> str:
        """Serialize ``configuration`` to a compact token with short codes."""

        timing = configuration.timing
        payload = {
            "p": [
                {"t": PLATFORM_CODES.get(item.platform, item.platform), "v": item.text}
                for item in configuration.items
            ],
            "h": timing.hold_ms,
            "i": timing.anim_in_ms,
            "o": timing.anim_out_ms,
        }
        return _to_token(payload)

    def decompress(self, token: str) -> Configuration:
        """Parse a compact token produced by :meth:`compress`.

        Unknown short codes are kept verbatim as platform ids unless the
        codec was created with ``strict_codes=True``.
        """

        return self._hydrate_compact(_from_token(token))

    def try_decompress(self, token: str) -> Optional[Configuration]:
        try:
            return self.decompress(token)
        except DecodeError as exc:
            _LOGGER.warning("Token decompress error: %s", exc)
            return None

    # -- either form -----------------------------------------------------

    def decode_any(self, token: str) -> Configuration:
        """Decode a full or compact token, whichever the payload turns out to be."""

        payload = _from_token(token)
        if isinstance(payload, dict) and "p" in payload and "platforms" not in payload:
            return self._hydrate_compact(payload)
        return self._hydrate_full(payload)

    def try_decode_any(self, token: str) -> Optional[Configuration]:
        try:
            return self.decode_any(token)
        except DecodeError as exc:
            _LOGGER.warning("Token decode error: %s", exc)
            return None

    # -- hydration -------------------------------------------------------

    def _hydrate_full(self, payload: Any) -> Configuration:
        _validate(payload, TOKEN_SCHEMA)
        entries = payload["platforms"]
        for index, entry in enumerate(entries):
            if entry["platform"] not in self._known:
                raise InvalidSchemaError(
                    f"Platform at index {index} is unknown: {entry['platform'][:32]!r}"
                )
        pairs = ((entry["platform"], entry["text"]) for entry in entries)
        return self._assemble(
            pairs,
            _optional_int(payload, "holdTime"),
            _optional_int(payload, "animInTime"),
            _optional_int(payload, "animOutTime"),
        )

    def _hydrate_compact(self, payload: Any) -> Configuration:
        _validate(payload, COMPACT_TOKEN_SCHEMA)
        pairs = []
        for index, entry in enumerate(payload["p"]):
            code = entry["t"]
            platform = CODE_PLATFORMS.get(code)
            if platform is None:
                if self._strict_codes:
                    raise InvalidSchemaError(
                        f"Platform code at index {index} is unknown: {code[:32]!r}"
                    )
                _LOGGER.debug("Passing unknown platform code through: %s", code)
                platform = code
            pairs.append((platform, entry["v"]))
        return self._assemble(
            pairs,
            _optional_int(payload, "h"),
            _optional_int(payload, "i"),
            _optional_int(payload, "o"),
        )

    def _assemble(
        self,
        pairs: Iterable[tuple],
        hold_ms: Optional[int],
        anim_in_ms: Optional[int],
        anim_out_ms: Optional[int],
    ) -> Configuration:
        items = build_items(pairs)
        if not items:
            raise InvalidSchemaError("Token has no platform with non-empty text")
        timing = self._default_timing.merged(
            hold_ms=hold_ms, anim_in_ms=anim_in_ms, anim_out_ms=anim_out_ms
        )
        return Configuration(items=tuple(items), timing=timing)


_DEFAULT_CODEC = TokenCodec()


def default_codec() -> TokenCodec:
    return _DEFAULT_CODEC


def encode(configuration: Configuration) -> str:
    return _DEFAULT_CODEC.encode(configuration)


def decode(token: str) -> Configuration:
    return _DEFAULT_CODEC.decode(token)


def try_decode(token: str) -> Optional[Configuration]:
    return _DEFAULT_CODEC.try_decode(token)


def is_valid(token: Any) -> bool:
    return _DEFAULT_CODEC.is_valid(token)


def compress(configuration: Configuration) -> str:
    return _DEFAULT_CODEC.compress(configuration)


def decompress(token: str) -> Configuration:
    return _DEFAULT_CODEC.decompress(token)

