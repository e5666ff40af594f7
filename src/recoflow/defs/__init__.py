"""Packed integer keys identifying tracker measurements.

- `trkr`: keys shared by all tracking subsystems (hitset and cluster keys)
- `mvtx`: MVTX stave/chip/strobe hitset keys and column/row hit keys
- `tpc`: TPC sector/side hitset keys and pad/time-bin hit keys
- `micromegas`: Micromegas segmentation/tile hitset keys and strip/sample hit keys
"""

from . import micromegas, mvtx, tpc, trkr
