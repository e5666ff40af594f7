"""Calorimeter embedding modules."""

from .combine import *
from .copy_nodes import *
