"""
main.py - Entry point rendering the bundled demo sketch.

    python -m runner.main --seed 42 --scale 4 --name arcs
"""

import math
import logging
from typing import Optional, Sequence

from primitives.affine import with_affine
from primitives.arc import Arc
from primitives.matrix import compose, rotation, shear_x, translation
from primitives.path import Dot
from utils.rng import RNG
from .cli import run_io
from .context import RenderContext

logger = logging.getLogger(__name__)

PALETTE = ("#264653", "#2a9d8f", "#e9c46a", "#f4a261", "#e76f51")


def arcs_sketch(ctx: RenderContext, rng: RNG) -> None:
    """Concentric random arcs, some sheared into elliptical polylines, plus a seed dot."""
    surface = ctx.surface
    cx, cy = ctx.width / 2, ctx.height / 2
    rings = max(4, int(min(ctx.width, ctx.height) / 6))

    surface.set_source("white")
    surface.paint()
    surface.set_line_width(0.6)

    for i in range(rings):
        radius = (i + 1) * min(cx, cy) / (rings + 1)
        start = rng.uniform(0, 2 * math.pi)
        sweep = rng.uniform(math.pi / 4, 3 * math.pi / 2)
        shape = Arc((cx, cy), radius, start, start + sweep, detail=64)
        surface.set_source(rng.choice(PALETTE))

        if rng.random() < 0.3:
            # Sheared arcs are no longer circular: draw the sampled polyline.
            skew = compose(translation((cx, cy)), shear_x(rng.uniform(-0.4, 0.4)),
                           translation((-cx, -cy)))
            polyline = shape.transform(skew)
            if polyline is not None:
                polyline.draw(surface)
        else:
            surface.new_sub_path()
            shape.draw(surface)
        surface.stroke()
        ctx.progress = (i + 1) / rings

    def signature() -> None:
        with with_affine(surface, surface.get_matrix() @ compose(
                translation((ctx.width - 4, ctx.height - 4)), rotation(rng.uniform(0, math.pi)))):
            surface.set_source("black")
            Dot((0.0, 0.0), radius=1.5).draw(surface)
            surface.fill()

    ctx.set_before_save_hook(signature)


def main(argv: Optional[Sequence[str]] = None) -> None:
    run_io(arcs_sketch, argv)


if __name__ == "__main__":
    main()
