"""TPC reconstruction modules."""

from .cluster_mover import *
