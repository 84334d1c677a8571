"""
Command line front end.

    mandelbrot-render preset --location spiral --zoom 2
    mandelbrot-render custom -x -0.75 -y 0 -z 1 --output overview.png --resize

Output options (--output, --resize, --verbose, ...) may be given either
before or after the subcommand.
"""

import sys
import time
from argparse import SUPPRESS, ArgumentParser

from .config import DEFAULT_HEIGHT, DEFAULT_WIDTH, RenderConfig, load_settings
from .errors import MandelbrotError
from .output import resize_half, resized_path, save_image
from .presets import list_preset_names, resolve_preset
from .renderer import MandelbrotRenderer, warmup_jit


def _add_output_options(parser, suppress=False):
    """
    Add the options shared by every subcommand.

    With suppress=True no defaults are set, so values given after the
    subcommand override those given before it without clobbering them.
    """
    def default(value):
        return SUPPRESS if suppress else value

    parser.add_argument('--output', type=str, dest='output', metavar='PATH',
                        default=default('output.png'),
                        help='image file to write (default: output.png)')
    parser.add_argument('--resize', dest='resize', action='store_true', default=default(False),
                        help='also write a half-size copy suffixed "_resized"')
    parser.add_argument('-v', '--verbose', dest='verbose', action='store_true',
                        default=default(False), help='print timing information')
    parser.add_argument('--width', type=int, dest='width', metavar='WIDTH',
                        default=default(DEFAULT_WIDTH),
                        help=f'image width in pixels (default: {DEFAULT_WIDTH})')
    parser.add_argument('--height', type=int, dest='height', metavar='HEIGHT',
                        default=default(DEFAULT_HEIGHT),
                        help=f'image height in pixels (default: {DEFAULT_HEIGHT})')
    parser.add_argument('--flat', dest='flat', action='store_true', default=default(False),
                        help='disable normal-map lighting')
    parser.add_argument('--threads', type=int, dest='threads', metavar='N',
                        default=default(None),
                        help='number of worker threads (default: all cores)')
    parser.add_argument('--settings', type=str, dest='settings', metavar='PATH',
                        default=default(None),
                        help='JSON file overriding render constants')


def build_parser():
    parser = ArgumentParser(prog='mandelbrot-render',
                            description='Render a lit Mandelbrot set image.')
    _add_output_options(parser)

    subparsers = parser.add_subparsers(dest='command', metavar='COMMAND')
    subparsers.required = True

    preset = subparsers.add_parser('preset', help='render a named location')
    preset.add_argument('--location', type=str, dest='location', metavar='NAME',
                        default='mandelbrot',
                        help=f'one of: {", ".join(list_preset_names())} (default: mandelbrot)')
    preset.add_argument('--zoom', type=float, dest='zoom_multiplier', metavar='MULTIPLIER',
                        default=1.0, help='multiplier applied to the preset zoom (default: 1)')
    _add_output_options(preset, suppress=True)

    custom = subparsers.add_parser('custom', help='render an arbitrary location')
    custom.add_argument('-x', type=float, dest='center_x', required=True,
                        help='real part of the image center')
    custom.add_argument('-y', type=float, dest='center_y', required=True,
                        help='imaginary part of the image center')
    custom.add_argument('-z', type=float, dest='zoom', required=True,
                        help='zoom factor, > 0')
    _add_output_options(custom, suppress=True)

    return parser


def _location(args):
    if args.command == 'preset':
        return resolve_preset(args.location, args.zoom_multiplier)
    return args.center_x, args.center_y, args.zoom


def run(args):
    """Render and save the image described by parsed arguments."""
    start = time.perf_counter()

    center_x, center_y, zoom = _location(args)
    config = load_settings(args.settings) if args.settings else RenderConfig()
    renderer = MandelbrotRenderer(args.width, args.height, config=config,
                                  num_threads=args.threads)

    if args.verbose:
        compile_start = time.perf_counter()
        warmup_jit(config)
        print(f"JIT warm-up took: {time.perf_counter() - compile_start:.3f}s")
        print(f"Rendering {args.width}x{args.height} at ({center_x}, {center_y}), zoom {zoom:g}")

    rgb = renderer.render(center_x, center_y, zoom, use_lighting=not args.flat)

    if args.verbose:
        print(f"Mandelbrot image generated in: {renderer.last_render_time:.3f}s, saving...")
    save_start = time.perf_counter()

    save_image(rgb, args.output)
    if args.resize:
        save_image(resize_half(rgb), resized_path(args.output))

    if args.verbose:
        print(f"Mandelbrot image saved in: {time.perf_counter() - save_start:.3f}s")
        print(f"Time elapsed overall is: {time.perf_counter() - start:.3f}s")


def main(argv=None):
    """
    Entry point for the mandelbrot-render command.

    Returns:
        Process exit status: 0 on success, 1 on a rendering or I/O error
    """
    args = build_parser().parse_args(argv)
    try:
        run(args)
    except MandelbrotError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return 130
    return 0
