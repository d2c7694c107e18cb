from .errors import RenderError, ConfigError, ResourceError, PersistenceError
from .config import RenderOptions, default_options
from .surface import RasterSurface
from .window import Event, EventKind, IdleLoop, OpenCVWindow
from .video import VideoState
from .context import OutputLayout, RenderContext, physical_size, resolve_seed
from .pipeline import TrialResult, run_trial, run_with, run_interactive
from .cli import parse_options, run_io, run_io_with, with_options


__all__ = [
    "errors",
    "config",
    "surface",
    "window",
    "video",
    "context",
    "pipeline",
    "cli",
    "main",
]
