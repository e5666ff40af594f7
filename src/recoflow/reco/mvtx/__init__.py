"""MVTX reconstruction modules."""

from .cluster_pruner import *
from .hit_pruner import *
