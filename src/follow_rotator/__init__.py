"""Follow Rotator core package."""

__all__ = [
    "application",
    "codec",
    "config_loader",
    "engine",
    "errors",
    "models",
    "overlay",
    "registry",
    "resolver",
    "scheduler",
    "schemas",
    "share",
]
