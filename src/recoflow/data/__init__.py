"""Data structures exchanged between reconstruction modules.

- `base`: Parent classes of value records and keyed containers
- `trkr`: Tracker hits, clusters and cluster-hit associations
- `track`: Reconstructed tracks and their states
- `header`: Run/event headers, synchronization object, persistent flags
- `hepmc`: Generator-level events
- `calo`: Calorimeter towers
- `trigger`: Global level-1 trigger packet
- `event`: Centrality, vertex and minimum-bias information
"""

from recoflow.utils.factory import module_dict

from . import calo, event, header, hepmc, track, trigger, trkr
from .calo import *
from .event import *
from .header import *
from .hepmc import *
from .track import *
from .trigger import *
from .trkr import *

# Build a dictionary of all the classes which can be stored to file
DATA_DICT = {}
for module in [trkr, track, header, hepmc, calo, trigger, event]:
    DATA_DICT.update(**module_dict(module))
