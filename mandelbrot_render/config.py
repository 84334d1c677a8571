"""
Render configuration.

RenderConfig bundles every constant the kernels need (iteration limit,
escape thresholds, lighting parameters and the palette) into one immutable
object, so several configurations can coexist in the same process.

Settings can also be read from a JSON file whose keys are RenderConfig
field names:

    {
        "max_iterations": 5000,
        "light_angle": 30.0,
        "palette": [[0, 0, 0], [255, 255, 255]]
    }
"""

import json
import math
import numbers
from dataclasses import dataclass, fields, replace

from .errors import InvalidParameters
from .palette import DEFAULT_ANCHORS


# Default output size: 1024 x 820 scaled by a downsample factor of 2,
# then doubled again.
DOWN_SAMPLE_FACTOR = 2
DEFAULT_WIDTH = 1024 * DOWN_SAMPLE_FACTOR * 2
DEFAULT_HEIGHT = 820 * DOWN_SAMPLE_FACTOR * 2

# Iteration counts are passed to the kernels as int64
MAX_ITERATIONS_LIMIT = 2 ** 63 - 1


@dataclass(frozen=True)
class RenderConfig:
    """Immutable set of constants used by the escape-time kernels."""

    max_iterations: int = 35000
    bailout: float = 1_000_000.0       # squared magnitude, plain variant
    escape_radius: float = 100.0       # radius, lit variant
    view_width: float = 3.0            # width of the plane at zoom 1
    height_factor: float = 1.0
    light_angle: float = 45.0          # degrees
    ambient_light: float = 0.3
    brightness_boost: float = 1.3
    plain_divisor_offset: float = 0.0
    lit_divisor_offset: float = 1.0
    palette: tuple = DEFAULT_ANCHORS
    interior_color: tuple = (255, 255, 255)

    def validate(self):
        """
        Check that the configuration can be rendered.

        Returns:
            self, so calls can be chained

        Raises:
            InvalidParameters if any field is out of range
        """
        if not is_whole_number(self.max_iterations) \
                or not 0 < self.max_iterations <= MAX_ITERATIONS_LIMIT:
            raise InvalidParameters(
                f"max_iterations must be a positive integer, got {self.max_iterations!r}")
        for name in ('bailout', 'escape_radius', 'view_width'):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise InvalidParameters(f"{name} must be positive and finite, got {value!r}")
        for name in ('height_factor', 'light_angle', 'brightness_boost',
                     'plain_divisor_offset', 'lit_divisor_offset'):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise InvalidParameters(f"{name} must be finite, got {value!r}")
        if self.height_factor <= -1.0:
            raise InvalidParameters("height_factor must be greater than -1")
        if self.brightness_boost < 0:
            raise InvalidParameters("brightness_boost must not be negative")
        if not 0.0 <= self.ambient_light <= 1.0:
            raise InvalidParameters(
                f"ambient_light must lie in [0, 1], got {self.ambient_light!r}")
        if len(self.palette) == 0:
            raise InvalidParameters("palette must contain at least one color")
        for color in tuple(self.palette) + (self.interior_color,):
            _check_rgb(color)
        return self

    def light_direction(self):
        """Unit vector pointing towards the light, as (real, imag)."""
        angle_rad = math.radians(self.light_angle)
        return math.cos(angle_rad), math.sin(angle_rad)

    def divisor(self, zoom, use_lighting):
        """
        Divisor applied to the smooth iteration count.

        The plain variant uses log2(zoom) and the lit variant log2(zoom + 1)
        with the default offsets. A zero divisor (plain variant at zoom 1)
        falls back to 1.0. Below zoom 1 the plain divisor is negative, so
        every escaped point clamps to the first palette color.
        """
        offset = self.lit_divisor_offset if use_lighting else self.plain_divisor_offset
        if zoom + offset <= 0:
            return 1.0
        value = math.log2(zoom + offset)
        if value == 0.0:
            return 1.0
        return value

    def with_overrides(self, **changes):
        """Return a validated copy with some fields replaced."""
        return _coerce(replace(self, **changes)).validate()


def is_whole_number(value):
    """True for a finite real number with no fractional part."""
    return isinstance(value, numbers.Real) and math.isfinite(value) and int(value) == value


def _check_rgb(color):
    if len(color) != 3 or any(not is_whole_number(c) or not 0 <= c <= 255 for c in color):
        raise InvalidParameters(f"colors must be RGB byte triples, got {color!r}")


def _coerce(config):
    """Normalise JSON lists into the tuple forms the dataclass expects."""
    palette = tuple(tuple(color) for color in config.palette)
    interior = tuple(config.interior_color)
    return replace(config, palette=palette, interior_color=interior)


def load_settings(path):
    """
    Load a RenderConfig from a JSON settings file.

    Args:
        path: Path to a JSON object keyed by RenderConfig field names.
            Missing keys keep their defaults.

    Returns:
        Validated RenderConfig

    Raises:
        InvalidParameters if the file cannot be read, is not valid JSON,
        has unknown keys or holds out-of-range values
    """
    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise InvalidParameters(f"could not load settings from {path}: {e}") from e

    if not isinstance(data, dict):
        raise InvalidParameters(f"settings in {path} must be a JSON object")

    known = {f.name for f in fields(RenderConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise InvalidParameters(f"unknown settings in {path}: {', '.join(unknown)}")

    try:
        return RenderConfig().with_overrides(**data)
    except (TypeError, ValueError, OverflowError) as e:
        if isinstance(e, InvalidParameters):
            raise
        raise InvalidParameters(f"bad settings in {path}: {e}") from e
