"""Exception hierarchy shared by the codec, resolver and share helper."""

from __future__ import annotations


class RotatorError(Exception):
    """Base class for every error raised by the Follow Rotator package."""


class DecodeError(RotatorError):
    """Raised when a token cannot be turned back into a configuration."""


class MalformedTokenError(DecodeError):
    """The token does not decode to structured JSON text."""


class InvalidSchemaError(DecodeError):
    """The token decodes but lacks a usable, non-empty platform list."""


class BadIntegerError(RotatorError, ValueError):
    """A timing parameter is present but is not a non-negative integer."""


class EmptyConfigurationError(RotatorError, ValueError):
    """A configuration was assembled without any rotation items."""


class ShareError(RotatorError):
    """User-facing problem while preparing a shareable link."""
