"""Writers which store events and logs to file."""

from .csv import *
from .hdf5 import *
