"""Top-level module of the recoflow source code."""

# Import main workflow entry point
from .driver import Driver
from .version import __version__
