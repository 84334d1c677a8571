"""
Exception types raised by the renderer, the preset table and the image writer.

All of them derive from MandelbrotError so the command line front end can
report any failure with a single except clause.
"""


class MandelbrotError(Exception):
    """Base class for every error raised by this package."""


class InvalidPreset(MandelbrotError, ValueError):
    """Raised when a preset name is not in the preset table."""

    def __init__(self, name, known=()):
        self.name = name
        self.known = tuple(known)
        message = f"invalid preset {name!r}"
        if self.known:
            message += f" (choose from: {', '.join(self.known)})"
        super().__init__(message)


class InvalidParameters(MandelbrotError, ValueError):
    """Raised for bad zoom, image dimensions, buffers or configuration."""


class ImageWriteError(MandelbrotError, OSError):
    """Raised when an image cannot be encoded or written to disk."""
