"""Event skimming modules."""

from .trigger import *
