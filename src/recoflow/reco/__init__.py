"""Reconstruction modules and the manager which runs them.

Each module is a :class:`SubsysReco` which reads its inputs from the node
tree, processes them and writes its outputs back to the tree. The modules
are grouped by concern:

- `ffa`: Framework modules (headers, synchronization, flags)
- `mvtx`: MVTX hit and cluster pruning
- `tpc`: TPC cluster re-projection
- `qa`: Quality assurance histograms
- `gen`: Generator-level event filters
- `calo`: Calorimeter embedding modules
- `skim`: Trigger-based event selection
- `dump`: Text dumps of node content
"""

from .base import SubsysReco
from .factories import RECO_DICT, reco_factory
from .manager import RecoManager
