"""
Writing rendered images to disk.

Images are (height, width, 3) uint8 arrays. They are handed to pygame as
surfaces and saved with pygame.image.save, which picks the encoding from
the file extension (PNG, BMP, TGA, JPEG).
"""

import os

# pygame prints a banner on import unless this is set
os.environ.setdefault('PYGAME_HIDE_SUPPORT_PROMPT', '1')

import numpy as np
import pygame

from .compute import downscale_2x
from .errors import ImageWriteError, InvalidParameters


def save_image(rgb, path):
    """
    Save an RGB array as an image file.

    Args:
        rgb: (height, width, 3) uint8 array, row 0 at the top
        path: Destination file; the extension selects the format

    Raises:
        ImageWriteError if pygame cannot encode or write the file
    """
    path = os.fspath(path)
    try:
        # surfarray is indexed [x, y]
        surface = pygame.surfarray.make_surface(np.ascontiguousarray(rgb.swapaxes(0, 1)))
        pygame.image.save(surface, path)
    except (pygame.error, OSError, ValueError) as e:
        raise ImageWriteError(f"could not write image to {path}: {e}") from e


def resize_half(rgb):
    """
    Halve both image dimensions with a 2x2 box filter.

    Odd trailing rows or columns are dropped.

    Returns:
        (height // 2, width // 2, 3) uint8 array
    """
    height, width = rgb.shape[:2]
    if height < 2 or width < 2:
        raise InvalidParameters(f"cannot halve an image of size {width}x{height}")
    dst = np.empty((height // 2, width // 2, 3), dtype=np.uint8)
    downscale_2x(rgb, dst)
    return dst


def resized_path(path):
    """Path for the halved image: 'output.png' -> 'output_resized.png'."""
    root, ext = os.path.splitext(os.fspath(path))
    return f"{root}_resized{ext}"
