"""
Mandelbrot Set Renderer Package

Renders the Mandelbrot set to an RGB image using escape-time iteration,
smooth palette interpolation and optional surface-normal lighting. The
per-pixel work is JIT-compiled with Numba and spread across image rows.

Quick Start:
    from mandelbrot_render import render
    rgb = render(-0.75, 0.0, 1.0, use_lighting=True, width=1024, height=820)

Or from command line:
    python -m mandelbrot_render preset --location spiral --output spiral.png

Package Structure:
    - config.py: RenderConfig constants and JSON settings loading
    - palette.py: Cyclic anchor palette with linear interpolation
    - compute.py: JIT-compiled escape-time, lighting and row kernels
    - renderer.py: Validation, buffer handling and thread control
    - presets.py: Named locations in the complex plane
    - output.py: Saving and halving images
    - cli.py: Command line interface
"""

from .config import DEFAULT_HEIGHT, DEFAULT_WIDTH, RenderConfig, load_settings
from .errors import ImageWriteError, InvalidParameters, InvalidPreset, MandelbrotError
from .palette import DEFAULT_ANCHORS, create_palette
from .presets import PRESETS, list_preset_names, resolve_preset
from .renderer import MandelbrotRenderer, render, warmup_jit

__version__ = "1.0.0"
__all__ = [
    "render",
    "warmup_jit",
    "MandelbrotRenderer",
    "RenderConfig",
    "load_settings",
    "DEFAULT_WIDTH",
    "DEFAULT_HEIGHT",
    "DEFAULT_ANCHORS",
    "create_palette",
    "PRESETS",
    "resolve_preset",
    "list_preset_names",
    "MandelbrotError",
    "InvalidPreset",
    "InvalidParameters",
    "ImageWriteError",
]
