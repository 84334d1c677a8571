import math

import numpy as np
import pytest

from mandelbrot_render.compute import (
    apply_lighting,
    downscale_2x,
    escape_time,
    escape_time_with_derivative,
    light_factor,
    pixel_color,
    scale_pixel,
    smooth_iteration,
    surface_normal,
)
from mandelbrot_render.config import RenderConfig
from mandelbrot_render.palette import DEFAULT_ANCHORS, color_at, create_palette

MAX_ITER = 35000
BAILOUT = 1_000_000.0
ESCAPE_RADIUS_SQ = 100.0 ** 2


def _pixel_color(cr, ci, use_lighting, divisor=1.0, config=RenderConfig()):
    light_r, light_i = config.light_direction()
    return pixel_color(
        cr, ci, use_lighting, config.max_iterations, config.bailout,
        config.escape_radius ** 2, divisor, create_palette(config.palette),
        light_r, light_i, config.height_factor, config.ambient_light,
        config.brightness_boost, np.array(config.interior_color, dtype=np.uint8),
    )


# --- coordinate mapping ---

def test_top_left_pixel_of_reference_view():
    real, imag = scale_pixel(0, 0, 2048, 1640, -0.75, 0.0, 1.0, 3.0)
    assert real == pytest.approx(-2.25)
    assert imag == pytest.approx(-1.2, abs=2e-3)


def test_center_pixel_maps_to_center():
    assert scale_pixel(1024, 820, 2048, 1640, -0.75, 0.1, 7.0, 3.0) == (-0.75, 0.1)


def test_scale_comes_from_width_only():
    # a tall image spans more of the imaginary axis than the real one
    real, imag = scale_pixel(0, 0, 100, 200, 0.0, 0.0, 1.0, 3.0)
    assert real == pytest.approx(-1.5)
    assert imag == pytest.approx(-3.0)


def test_zoom_shrinks_the_view():
    real, _ = scale_pixel(0, 0, 100, 100, 0.0, 0.0, 10.0, 3.0)
    assert real == pytest.approx(-0.15)


def test_mapping_is_repeatable():
    first = scale_pixel(17, 33, 640, 480, -1.2494989, 0.0303330, 4.437e4, 3.0)
    second = scale_pixel(17, 33, 640, 480, -1.2494989, 0.0303330, 4.437e4, 3.0)
    assert first == second


# --- escape time ---

def test_far_exterior_point_escapes_quickly():
    n, r2 = escape_time(2.0, 2.0, MAX_ITER, BAILOUT)
    assert n == 4
    assert r2 > BAILOUT


def test_far_exterior_point_escapes_within_two_steps_with_small_bailout():
    n, _ = escape_time(2.0, 2.0, MAX_ITER, 4.0)
    assert n <= 2


def test_lit_variant_uses_its_own_radius():
    n, r2, *_ = escape_time_with_derivative(2.0, 2.0, MAX_ITER, ESCAPE_RADIUS_SQ)
    assert n == 3
    assert r2 == pytest.approx(10600.0)


@pytest.mark.parametrize("c", [(-0.75, 0.0), (0.0, 0.0), (-1.0, 0.0), (0.25, 0.0)])
def test_points_in_the_set_stay_bounded(c):
    n, _ = escape_time(c[0], c[1], MAX_ITER, BAILOUT)
    assert n == MAX_ITER
    n_lit = escape_time_with_derivative(c[0], c[1], MAX_ITER, ESCAPE_RADIUS_SQ)[0]
    assert n_lit == MAX_ITER


def test_derivative_follows_the_chain_rule():
    # after one step z = c and dz/dc = 1
    n, r2, zr, zi, dr, di = escape_time_with_derivative(0.5, 0.5, MAX_ITER, 0.4)
    assert (n, zr, zi, dr, di) == (1, 0.5, 0.5, 1.0, 0.0)
    assert r2 == pytest.approx(0.5)

    # after two steps z = c² + c and dz/dc = 2c + 1
    n, r2, zr, zi, dr, di = escape_time_with_derivative(0.5, 0.5, MAX_ITER, 0.6)
    assert n == 2
    assert (zr, zi) == pytest.approx((0.5, 1.0))
    assert (dr, di) == pytest.approx((2.0, 1.0))


# --- normal, smoothing, lighting ---

def test_surface_normal_is_unit_quotient():
    ur, ui = surface_normal(3.0, 4.0, 1.0, 0.0)
    assert (ur, ui) == pytest.approx((0.6, 0.8))
    ur, ui = surface_normal(1.0, 1.0, 0.0, 2.0)
    # (1 + i) / 2i = (1 - i) / 2
    assert (ur, ui) == pytest.approx((math.sqrt(0.5), -math.sqrt(0.5)))


def test_surface_normal_of_overflowed_derivative():
    assert surface_normal(3.0, 4.0, math.inf, 0.0) == (0.0, 0.0)
    assert surface_normal(0.0, 0.0, 1.0, 0.0) == (0.0, 0.0)


def test_smooth_iteration_formula():
    n, r2, divisor = 10, 1e7, 2.0
    expected = (n + 1 - math.log2(0.5 * math.log(r2) / math.log(2))) / divisor
    assert smooth_iteration(n, r2, divisor) == pytest.approx(expected)


def test_smooth_iteration_can_go_negative_for_early_escape():
    """Early escapes give negative values; color_at treats them as 0."""
    assert smooth_iteration(1, 1e300, 1.0) < 0.0


def test_light_factor_extremes():
    lr, li = RenderConfig().light_direction()
    assert light_factor(lr, li, lr, li, 1.0, 0.3) == pytest.approx(1.0)
    assert light_factor(-lr, -li, lr, li, 1.0, 0.3) == pytest.approx(0.3)
    assert light_factor(0.0, 0.0, lr, li, 1.0, 0.3) == pytest.approx(0.65)


@pytest.mark.parametrize("height_factor", [-0.9, 0.0, 1.0, 5.0])
def test_light_factor_is_clamped(height_factor):
    lr, li = RenderConfig().light_direction()
    for angle in np.linspace(0.0, 2.0 * math.pi, 37):
        factor = light_factor(math.cos(angle), math.sin(angle), lr, li, height_factor, 0.3)
        assert 0.0 <= factor <= 1.0


def test_lighting_never_overflows():
    for factor in np.linspace(0.0, 1.0, 11):
        for base in range(0, 256, 15):
            for channel in apply_lighting(base, 255, 0, factor, 1.3):
                assert 0 <= channel <= 255
    assert apply_lighting(255, 255, 255, 1.0, 1.3) == (255, 255, 255)


def test_lighting_truncates():
    assert apply_lighting(100, 50, 0, 0.5, 1.3) == (65, 32, 0)


# --- pixel color ---

@pytest.mark.parametrize("use_lighting", [False, True])
def test_interior_point_is_white(use_lighting):
    assert _pixel_color(-0.75, 0.0, use_lighting) == (255, 255, 255)


def test_custom_interior_color():
    config = RenderConfig(interior_color=(1, 2, 3))
    assert _pixel_color(0.0, 0.0, False, config=config) == (1, 2, 3)


def test_plain_exterior_color_comes_from_palette():
    n, r2 = escape_time(2.0, 2.0, MAX_ITER, BAILOUT)
    expected = color_at(create_palette(), smooth_iteration(n, r2, 1.0))
    assert _pixel_color(2.0, 2.0, False) == expected


def test_lit_exterior_color_is_shaded():
    n, r2, zr, zi, dr, di = escape_time_with_derivative(2.0, 2.0, MAX_ITER, ESCAPE_RADIUS_SQ)
    lr, li = RenderConfig().light_direction()
    ur, ui = surface_normal(zr, zi, dr, di)
    factor = light_factor(ur, ui, lr, li, 1.0, 0.3)
    base = color_at(create_palette(), smooth_iteration(n, r2, 1.0))
    assert _pixel_color(2.0, 2.0, True) == apply_lighting(*base, factor, 1.3)


def test_first_anchor_for_very_early_escape():
    # c far outside escapes at n = 1 with a huge radius, giving a negative value
    assert _pixel_color(1e4, 0.0, False) == DEFAULT_ANCHORS[0]


# --- downscale ---

def test_downscale_averages_blocks():
    src = np.zeros((4, 4, 3), dtype=np.uint8)
    src[0:2, 0:2] = [[[0, 4, 8], [4, 8, 12]], [[8, 12, 16], [12, 16, 20]]]
    src[2:4, 2:4] = 255
    dst = np.zeros((2, 2, 3), dtype=np.uint8)
    downscale_2x(src, dst)
    assert tuple(dst[0, 0]) == (6, 10, 14)
    assert tuple(dst[1, 1]) == (255, 255, 255)
    assert tuple(dst[0, 1]) == (0, 0, 0)
