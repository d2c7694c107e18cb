from .rng import RNGBackend, RNG, MAX_SEED
from .logging_utils import configure_logging, ColorFormatter


__all__ = [
    "rng",
    "logging_utils",
]
