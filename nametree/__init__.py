"""nametree package initialization."""

from importlib.metadata import version, PackageNotFoundError

from .api import generate_tree, run_pipeline
from .layout import compute_layout, rotate
from .resolver import resolve

__all__ = ["__version__", "generate_tree", "run_pipeline", "resolve", "compute_layout", "rotate"]

try:
    __version__ = version("nametree")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.1.0"
