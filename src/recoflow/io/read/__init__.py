"""Readers which load events from file."""

from .hdf5 import *
