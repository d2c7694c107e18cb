"""
errors.py - Error taxonomy of the render pipeline.

    RenderError
     |- ConfigError       malformed options; raised before any trial starts
     |- ResourceError     surface, window or output directory unavailable
     |- PersistenceError  PNG could not be written
"""

__all__ = ["RenderError", "ConfigError", "ResourceError", "PersistenceError"]


class RenderError(Exception):
    """Base class for render pipeline failures."""


class ConfigError(RenderError, ValueError):
    pass


class ResourceError(RenderError):
    pass


class PersistenceError(RenderError):
    pass
