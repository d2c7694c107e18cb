"""
cli.py - Command-line front end for sketches.

    def sketch(ctx, rng):
        ...

    if __name__ == "__main__":
        run_io(sketch)

Options:
    --seed SEED          pin the seed (default: current time in ms, per trial)
    --scale SCALE        user space to pixel factor (default 1)
    -w, --width WIDTH    user-space width (default 100)
    -h, --height HEIGHT  user-space height (default 100)
    --times TIMES        number of sequential trials (default 1)
    --name NAME          output directory name under images/ (default sketch)
    --metadata TEXT      suffix appended to the artifact file name
    --fps FPS            frame rate exposed to the sketch (default 30)
    --interactive        show the result in a window
    --log-level LEVEL    console/file log level (default INFO)
    --log-dir DIR        also write a rotating log file to DIR

``-h`` is the height; help is only available as ``--help``.
"""

import argparse
import logging
from dataclasses import replace
from typing import Callable, Optional, Sequence

from utils.logging_utils import configure_logging
from .config import (
    DEFAULT_FPS, DEFAULT_HEIGHT, DEFAULT_NAME, DEFAULT_SCALE, DEFAULT_TIMES,
    DEFAULT_WIDTH, RenderOptions,
)
from .errors import ConfigError
from .pipeline import Sketch, TrialResult, run_interactive, run_with

OptionsModifier = Callable[[RenderOptions], RenderOptions]

logger = logging.getLogger(__name__)


def _u64(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid seed: {text!r}")
    if not 0 <= value < 2**64:
        raise argparse.ArgumentTypeError(f"seed out of range [0, 2**64): {text}")
    return value


def build_parser(prog: Optional[str] = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=prog or "seedcanvas",
        description="Generate art with seedcanvas",
        add_help=False,
    )
    parser.add_argument("--help", action="help", help="show this help message and exit")
    parser.add_argument("--seed", type=_u64, default=None, metavar="SEED")
    parser.add_argument("--scale", type=float, default=DEFAULT_SCALE, metavar="SCALE")
    parser.add_argument("-w", "--width", type=int, default=DEFAULT_WIDTH, metavar="WIDTH")
    parser.add_argument("-h", "--height", type=int, default=DEFAULT_HEIGHT, metavar="HEIGHT")
    parser.add_argument("--times", type=int, default=DEFAULT_TIMES, metavar="TIMES")
    parser.add_argument("--name", default=DEFAULT_NAME, metavar="NAME")
    parser.add_argument("--metadata", default=None, metavar="METADATA")
    parser.add_argument("--fps", type=int, default=DEFAULT_FPS, metavar="FPS")
    parser.add_argument("--interactive", action="store_true")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    parser.add_argument("--log-dir", default=None, metavar="DIR")
    return parser


def options_from_args(args: argparse.Namespace) -> RenderOptions:
    return RenderOptions(
        seed=args.seed,
        scale=args.scale,
        width=args.width,
        height=args.height,
        times=args.times,
        name=args.name,
        metadata=args.metadata,
        fps=args.fps,
    )


def parse_options(argv: Optional[Sequence[str]] = None,
                  parser: Optional[argparse.ArgumentParser] = None) -> RenderOptions:
    """Parse ``argv`` into validated options; malformed values exit with a usage error."""
    parser = parser or build_parser()
    args = parser.parse_args(argv)
    try:
        return options_from_args(args)
    except ConfigError as e:
        parser.error(str(e))


def run_io_with(modifier: OptionsModifier, sketch: Sketch,
                argv: Optional[Sequence[str]] = None) -> list[TrialResult]:
    """Parse the command line, apply ``modifier`` to the options, and render."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        options = modifier(options_from_args(args))
    except ConfigError as e:
        parser.error(str(e))

    configure_logging(level=getattr(logging, args.log_level), log_dir=args.log_dir,
                      run_prefix=options.name)
    logger.debug(f"Options: {options}")
    try:
        if args.interactive:
            return run_interactive(options, sketch)
        return run_with(options, sketch)
    except Exception as e:
        logger.critical(f"Run aborted due to fatal error: {e}")
        raise SystemExit(1)


def run_io(sketch: Sketch, argv: Optional[Sequence[str]] = None) -> list[TrialResult]:
    """Render ``sketch`` with options parsed from the command line."""
    return run_io_with(lambda options: options, sketch, argv)


def with_options(**changes) -> OptionsModifier:
    """Modifier overriding the given option fields, e.g. ``with_options(width=300)``."""
    def modifier(options: RenderOptions) -> RenderOptions:
        try:
            return replace(options, **changes)
        except TypeError as e:
            raise ConfigError(str(e)) from e
    return modifier
