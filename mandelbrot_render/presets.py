"""
Named locations in the complex plane.

Each preset maps to (center_x, center_y, base_zoom). To add a new
location, add it to the PRESETS dictionary below.
"""

from .errors import InvalidPreset


# Registry of all available locations.
PRESETS = {
    'mandelbrot': (-0.75, 0.0, 1.0),
    'mini-mandelbrot': (-1.249559196, 0.030466443, 1.73e6),
    'spiral': (-1.2494989, 0.0303330, 4.437e4),
    'quad-spiral': (-4.621603e-1, -5.823998e-1, 2.633507e7),
}


def resolve_preset(name, zoom_multiplier=1.0):
    """
    Look up a preset location.

    Args:
        name: Key from PRESETS
        zoom_multiplier: Factor applied to the preset's base zoom

    Returns:
        (center_x, center_y, zoom) with zoom = base_zoom * zoom_multiplier

    Raises:
        InvalidPreset if name is not found
    """
    try:
        center_x, center_y, base_zoom = PRESETS[name]
    except KeyError:
        raise InvalidPreset(name, list_preset_names()) from None
    return center_x, center_y, base_zoom * zoom_multiplier


def list_preset_names():
    """Get list of available preset names."""
    return list(PRESETS.keys())
