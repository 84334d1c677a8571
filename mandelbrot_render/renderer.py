"""
Row-parallel Mandelbrot renderer.

The MandelbrotRenderer class handles:
- Validation of the view and image size before any work starts
- Translating a RenderConfig into the scalar arguments of the JIT kernels
- Writing into a caller-supplied buffer or a freshly allocated one
- Rendering a sub-range of rows, bit-identical to the same rows of a
  full render
- Bounding the worker pool size for the duration of a render
"""

import math
import time

import numpy as np
from numba import config as numba_config
from numba import get_num_threads, set_num_threads

from .compute import downscale_2x, scale_pixel
from .compute import render_rows as _render_rows_kernel
from .config import RenderConfig, is_whole_number
from .errors import InvalidParameters
from .palette import create_palette


def validate_view(center_x, center_y, zoom):
    """Raise InvalidParameters unless the center is finite and zoom is finite and > 0."""
    for name, value in (('center_x', center_x), ('center_y', center_y)):
        if not math.isfinite(value):
            raise InvalidParameters(f"{name} must be finite, got {value!r}")
    if not math.isfinite(zoom) or zoom <= 0:
        raise InvalidParameters(f"zoom must be positive and finite, got {zoom!r}")


def validate_dimensions(width, height):
    """Raise InvalidParameters unless width and height are positive integers."""
    for name, value in (('width', width), ('height', height)):
        if not is_whole_number(value) or value <= 0:
            raise InvalidParameters(f"{name} must be a positive integer, got {value!r}")


class MandelbrotRenderer:
    """
    Renders Mandelbrot images of a fixed size.

    Usage:
        renderer = MandelbrotRenderer(2048, 1640)
        rgb = renderer.render(-0.75, 0.0, 1.0, use_lighting=False)
        # rgb is a (1640, 2048, 3) uint8 array, row 0 at the top

    Attributes:
        width, height: Image dimensions in pixels
        config: RenderConfig with iteration and lighting constants
        num_threads: Worker threads used per render (None = Numba default)
        last_render_time: Wall time of the most recent render in seconds
    """

    def __init__(self, width, height, config=None, num_threads=None):
        """
        Initialize the renderer.

        Args:
            width, height: Image dimensions in pixels
            config: RenderConfig (default RenderConfig())
            num_threads: Number of worker threads, or None for all available

        Raises:
            InvalidParameters for bad dimensions, thread count or config
        """
        validate_dimensions(width, height)
        if num_threads is not None and (not is_whole_number(num_threads) or num_threads <= 0):
            raise InvalidParameters(f"num_threads must be a positive integer, got {num_threads!r}")

        self.width = int(width)
        self.height = int(height)
        self.config = (config or RenderConfig()).validate()
        self.num_threads = num_threads
        self.last_render_time = None

        # Kernel inputs derived from the config, computed once
        self.palette = create_palette(self.config.palette)
        self.interior = np.array(self.config.interior_color, dtype=np.uint8)
        self.light_r, self.light_i = self.config.light_direction()

    def pixel_to_complex(self, x, y, center_x, center_y, zoom):
        """Complex-plane coordinate (real, imag) of pixel (x, y)."""
        validate_view(center_x, center_y, zoom)
        return scale_pixel(x, y, self.width, self.height,
                           float(center_x), float(center_y), float(zoom),
                           float(self.config.view_width))

    def render(self, center_x, center_y, zoom, use_lighting=True, out=None):
        """
        Render the full image.

        Args:
            center_x, center_y: Point of the complex plane at the image center
            zoom: Magnification, > 0
            use_lighting: Shade by the estimated surface normal
            out: Optional (height, width, 3) uint8 array to fill in place

        Returns:
            The filled (height, width, 3) uint8 array
        """
        return self.render_rows(center_x, center_y, zoom, use_lighting,
                                0, self.height, out=out)

    def render_rows(self, center_x, center_y, zoom, use_lighting, row_start, row_stop, out=None):
        """
        Render image rows row_start .. row_stop - 1.

        The rows are computed exactly as in a full render, so the result
        equals render(...)[row_start:row_stop].

        Returns:
            (row_stop - row_start, width, 3) uint8 array
        """
        validate_view(center_x, center_y, zoom)
        if not 0 <= row_start <= row_stop <= self.height:
            raise InvalidParameters(
                f"row range [{row_start}, {row_stop}) outside image of height {self.height}")
        shape = (row_stop - row_start, self.width, 3)
        out = self._prepare_buffer(out, shape)

        config = self.config
        divisor = config.divisor(zoom, use_lighting)

        start = time.perf_counter()
        previous_threads = get_num_threads()
        if self.num_threads is not None:
            set_num_threads(min(self.num_threads, numba_config.NUMBA_NUM_THREADS))
        try:
            _render_rows_kernel(
                out, int(row_start), self.width, self.height,
                float(center_x), float(center_y), float(zoom),
                float(config.view_width), bool(use_lighting),
                int(config.max_iterations), float(config.bailout),
                float(config.escape_radius) ** 2, float(divisor),
                self.palette, self.light_r, self.light_i,
                float(config.height_factor), float(config.ambient_light),
                float(config.brightness_boost), self.interior,
            )
        finally:
            if self.num_threads is not None:
                set_num_threads(previous_threads)
        self.last_render_time = time.perf_counter() - start
        return out

    def _prepare_buffer(self, out, shape):
        if out is None:
            return np.zeros(shape, dtype=np.uint8)
        if out.shape != shape or out.dtype != np.uint8 or not out.flags.c_contiguous \
                or not out.flags.writeable:
            raise InvalidParameters(
                f"output buffer must be a writable C-contiguous uint8 array of shape {shape}, "
                f"got {out.dtype} {out.shape}")
        return out


def render(center_x, center_y, zoom, use_lighting, width, height, config=None, num_threads=None):
    """
    Render a Mandelbrot image.

    Returns:
        (height, width, 3) uint8 RGB array, row-major, row 0 at the top
    """
    renderer = MandelbrotRenderer(width, height, config=config, num_threads=num_threads)
    return renderer.render(center_x, center_y, zoom, use_lighting)


def warmup_jit(config=None):
    """
    Warm up JIT compilation with a tiny render of both variants.

    Call this once at startup to compile the Numba kernels, so the first
    real render is not charged for compilation.
    """
    renderer = MandelbrotRenderer(4, 4, config=config)
    renderer.render(-0.75, 0.0, 1.0, use_lighting=False)
    renderer.render(-0.75, 0.0, 1.0, use_lighting=True)
    downscale_2x(np.zeros((4, 4, 3), dtype=np.uint8), np.zeros((2, 2, 3), dtype=np.uint8))
