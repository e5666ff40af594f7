"""Generator-level event filters."""

from .jet_trigger import *
from .particle_trigger import *
