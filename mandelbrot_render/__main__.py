"""
Allow running the package directly: python -m mandelbrot_render
"""
import sys

from .cli import main

sys.exit(main())
