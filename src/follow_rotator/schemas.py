"""JSON schemas for token payloads, the ``data`` parameter and registry files."""

from __future__ import annotations

_TIMING_VALUE = {"type": "integer", "minimum": 0}

ITEMS_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "array",
    "items": {
        "type": "object",
        "required": ["platform", "text"],
        "properties": {
            "platform": {"type": "string", "minLength": 1},
            "text": {"type": "string"},
        },
    },
}

TOKEN_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["platforms"],
    "properties": {
        "platforms": {**ITEMS_SCHEMA, "minItems": 1},
        "holdTime": _TIMING_VALUE,
        "animInTime": _TIMING_VALUE,
        "animOutTime": _TIMING_VALUE,
    },
}

COMPACT_TOKEN_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["p"],
    "properties": {
        "p": {
            "type": "array",
            "minItems": 1,
            "items": {
                "type": "object",
                "required": ["t", "v"],
                "properties": {
                    "t": {"type": "string", "minLength": 1},
                    "v": {"type": "string"},
                },
            },
        },
        "h": _TIMING_VALUE,
        "i": _TIMING_VALUE,
        "o": _TIMING_VALUE,
    },
}

_COLOR = {"type": "string", "minLength": 1}

REGISTRY_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["platforms"],
    "properties": {
        "version": {"type": "string"},
        "platforms": {
            "type": "array",
            "minItems": 1,
            "items": {
                "type": "object",
                "required": ["id", "name", "icon", "background", "cta"],
                "properties": {
                    "id": {"type": "string", "minLength": 1},
                    "name": {"type": "string"},
                    "icon": {"type": "string"},
                    "background": _COLOR,
                    "text_color": _COLOR,
                    "cta": {
                        "type": "object",
                        "required": ["text", "background"],
                        "properties": {
                            "text": {"type": "string"},
                            "background": _COLOR,
                            "text_color": _COLOR,
                            "icon": {"type": "string"},
                        },
                        "additionalProperties": False,
                    },
                },
                "additionalProperties": False,
            },
        },
        "defaults": {
            "type": "object",
            "properties": {
                "items": ITEMS_SCHEMA,
                "hold_ms": _TIMING_VALUE,
                "anim_in_ms": _TIMING_VALUE,
                "anim_out_ms": _TIMING_VALUE,
            },
            "additionalProperties": False,
        },
    },
    "additionalProperties": False,
}
