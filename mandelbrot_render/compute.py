"""
Mandelbrot computation functions using Numba JIT compilation.

This module contains all the performance-critical per-pixel functions.
They are JIT-compiled and handle:
- Mapping pixel indices to points of the complex plane
- Escape-time iteration of z² + c, with and without derivative tracking
- Smooth (fractional) iteration counts for band-free coloring
- Directional lighting from the estimated surface normal
- The row-parallel kernel that fills an RGB buffer

All arithmetic is done in float64 on separate real and imaginary parts.
The kernels are compiled with error_model='numpy' so a degenerate division
yields inf/nan instead of raising inside the parallel loop.
"""

import math

from numba import jit, prange

from .palette import color_at


@jit(nopython=True, cache=True)
def scale_pixel(x, y, width, height, center_x, center_y, zoom, view_width):
    """
    Map a pixel index to a point of the complex plane.

    Both axes share one scale derived from the image width, so pixels are
    square and the visible height is view_width * height / width / zoom.

    Returns:
        (real, imag) as floats
    """
    fx = float(x)
    fy = float(y)
    image_width = float(width)
    image_height = float(height)

    scale = view_width / zoom / image_width

    real = center_x + (fx - image_width / 2.0) * scale
    imag = center_y + (fy - image_height / 2.0) * scale
    return real, imag


@jit(nopython=True, cache=True)
def escape_time(cr, ci, max_iter, bailout):
    """
    Iterate z -> z² + c from z = 0 until |z|² exceeds bailout.

    Args:
        cr, ci: Real and imaginary parts of c
        max_iter: Iteration limit
        bailout: Threshold on the squared magnitude

    Returns:
        (n, r2): iteration index at which |z|² first exceeded bailout and
        that squared magnitude. n == max_iter means the orbit stayed bounded.
    """
    zr = 0.0
    zi = 0.0
    r2 = 0.0
    for n in range(max_iter):
        r2 = zr * zr + zi * zi
        if r2 > bailout:
            return n, r2
        zr, zi = zr * zr - zi * zi + cr, 2.0 * zr * zi + ci
    return max_iter, r2


@jit(nopython=True, cache=True)
def escape_time_with_derivative(cr, ci, max_iter, escape_radius_sq):
    """
    Escape-time iteration that also tracks dz/dc.

    The derivative starts at 1 and follows d -> 2·z·d + 1, using z from
    before the step.

    Returns:
        (n, r2, zr, zi, dr, di) with the same meaning of n as escape_time,
        plus the final z and derivative.
    """
    zr = 0.0
    zi = 0.0
    dr = 1.0
    di = 0.0
    r2 = 0.0
    for n in range(max_iter):
        r2 = zr * zr + zi * zi
        if r2 > escape_radius_sq:
            return n, r2, zr, zi, dr, di
        dr, di = 2.0 * (zr * dr - zi * di) + 1.0, 2.0 * (zr * di + zi * dr)
        zr, zi = zr * zr - zi * zi + cr, 2.0 * zr * zi + ci
    return max_iter, r2, zr, zi, dr, di


@jit(nopython=True, cache=True, error_model='numpy')
def surface_normal(zr, zi, dr, di):
    """
    Unit vector in the direction of z / dz.

    Returns (0, 0) when the quotient vanishes or is not finite, which
    happens once the derivative overflows.
    """
    den = dr * dr + di * di
    ur = (zr * dr + zi * di) / den
    ui = (zi * dr - zr * di) / den
    norm = math.sqrt(ur * ur + ui * ui)
    if not (math.isfinite(norm) and norm > 0.0):
        return 0.0, 0.0
    return ur / norm, ui / norm


@jit(nopython=True, cache=True, error_model='numpy')
def smooth_iteration(n, r2, divisor):
    """
    Continuous iteration count for an escaped point.

    nu estimates how far past the bailout the orbit overshot, so
    n + 1 - nu varies smoothly across escape-count boundaries.
    """
    log_zn = math.log(r2) * 0.5
    nu = math.log2(log_zn / math.log(2.0))
    return (n + 1.0 - nu) / divisor


@jit(nopython=True, cache=True)
def light_factor(ur, ui, light_r, light_i, height_factor, ambient):
    """Brightness multiplier in [0, 1] from a unit normal and the light direction."""
    t = ur * light_r + ui * light_i + height_factor
    t = t / (1.0 + height_factor)
    return min(max(t * (1.0 - ambient) + ambient, 0.0), 1.0)


@jit(nopython=True, cache=True)
def apply_lighting(r, g, b, factor, boost):
    """Scale a color by factor * boost, truncating and clamping to [0, 255]."""
    scale = factor * boost
    lr = min(max(int(r * scale), 0), 255)
    lg = min(max(int(g * scale), 0), 255)
    lb = min(max(int(b * scale), 0), 255)
    return lr, lg, lb


@jit(nopython=True, cache=True, error_model='numpy')
def pixel_color(cr, ci, use_lighting, max_iter, bailout, escape_radius_sq,
                divisor, palette, light_r, light_i, height_factor, ambient,
                boost, interior):
    """
    Color of a single point c of the complex plane.

    Args:
        cr, ci: Point to evaluate
        use_lighting: Track the derivative and shade by the surface normal
        max_iter: Iteration limit
        bailout: Squared escape threshold for the plain variant
        escape_radius_sq: Squared escape threshold for the lit variant
        divisor: Smooth iteration divisor for the selected variant
        palette: Nx3 uint8 anchor colors
        light_r, light_i: Unit light direction
        height_factor, ambient, boost: Lighting constants
        interior: uint8 RGB array used for points that never escape

    Returns:
        (r, g, b) integers in [0, 255]
    """
    if use_lighting:
        n, r2, zr, zi, dr, di = escape_time_with_derivative(cr, ci, max_iter, escape_radius_sq)
        if n >= max_iter:
            return int(interior[0]), int(interior[1]), int(interior[2])
        ur, ui = surface_normal(zr, zi, dr, di)
        factor = light_factor(ur, ui, light_r, light_i, height_factor, ambient)
        r, g, b = color_at(palette, smooth_iteration(n, r2, divisor))
        return apply_lighting(r, g, b, factor, boost)

    n, r2 = escape_time(cr, ci, max_iter, bailout)
    if n >= max_iter:
        return int(interior[0]), int(interior[1]), int(interior[2])
    return color_at(palette, smooth_iteration(n, r2, divisor))


@jit(nopython=True, parallel=True, cache=True, error_model='numpy')
def render_rows(out, row_start, width, height, center_x, center_y, zoom,
                view_width, use_lighting, max_iter, bailout, escape_radius_sq,
                divisor, palette, light_r, light_i, height_factor, ambient,
                boost, interior):
    """
    Fill out with the colors of rows row_start .. row_start + out.shape[0].

    Rows are distributed across threads with prange. Each iteration
    writes only out[i], so no synchronization is needed beyond the
    implicit join at the end of the loop.

    Args:
        out: uint8 array (rows, width, 3), modified in place
        row_start: Image row that out[0] corresponds to
        width, height: Full image dimensions (used for the mapping)
        center_x, center_y, zoom, view_width: View of the complex plane
        remaining: see pixel_color
    """
    rows = out.shape[0]
    for i in prange(rows):
        py = row_start + i
        for px in range(width):
            cr, ci = scale_pixel(px, py, width, height, center_x, center_y, zoom, view_width)
            r, g, b = pixel_color(cr, ci, use_lighting, max_iter, bailout,
                                  escape_radius_sq, divisor, palette, light_r,
                                  light_i, height_factor, ambient, boost, interior)
            out[i, px, 0] = r
            out[i, px, 1] = g
            out[i, px, 2] = b


@jit(nopython=True, parallel=True, cache=True)
def downscale_2x(src, dst):
    """
    Downscale an image by 2x using a box filter (4-pixel average).

    Args:
        src: Source image (at least 2*height, 2*width, 3)
        dst: Destination image (height, width, 3), modified in place
    """
    height, width = dst.shape[:2]
    for y in prange(height):
        y2 = y * 2
        for x in range(width):
            x2 = x * 2
            for c in range(3):
                val = (int(src[y2, x2, c]) + int(src[y2, x2 + 1, c]) +
                       int(src[y2 + 1, x2, c]) + int(src[y2 + 1, x2 + 1, c])) // 4
                dst[y, x, c] = val
