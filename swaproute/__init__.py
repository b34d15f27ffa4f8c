from importlib.metadata import version

__version__ = version("swaproute")

from . import pipeline, sources, utils

__all__ = ["__version__", "utils", "sources", "pipeline"]
