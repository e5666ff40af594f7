"""Module with a general-purpose tracking geometry class.

This class supports the storage of:
- MVTX layers (staves of pixel chips)
- TPC readout layer radii
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .mvtx import CylinderGeomMvtx
from .tpc import TpcGeomContainer

__all__ = ["Geometry"]


@dataclass
class Geometry:
    """Tracking geometry of a detector.

    Attributes
    ----------
    name : str
        Name of the detector
    tag : str
        Tag or label for the geometry instance
    version : str
        Version number of the geometry
    mvtx : List[CylinderGeomMvtx]
        Geometry of each MVTX layer
    tpc : TpcGeomContainer
        TPC readout layer radii
    """

    name: str
    tag: str
    version: str
    mvtx: List[CylinderGeomMvtx]
    tpc: Optional[TpcGeomContainer]

    def __init__(
        self,
        name: str,
        tag: str,
        version: str,
        mvtx: Optional[List[Dict[str, Any]]] = None,
        tpc: Optional[Dict[str, Any]] = None,
    ):
        """Initialize the detector geometry.

        Parameters
        ----------
        name : str
            Name of the detector
        tag : str
            Tag or label for the geometry instance
        version : str
            Version number of the geometry
        mvtx : List[dict], optional
            Configuration of each MVTX layer
        tpc : dict, optional
            TPC readout layer configuration
        """
        self.name = name
        self.tag = tag
        self.version = version
        self.mvtx = [CylinderGeomMvtx(**layer) for layer in (mvtx or [])]
        self.tpc = TpcGeomContainer(**tpc) if tpc is not None else None

    def get_mvtx_layer(self, layer) -> CylinderGeomMvtx:
        """Returns the geometry of one MVTX layer."""
        for geom in self.mvtx:
            if geom.layer == layer:
                return geom

        raise KeyError(f"No MVTX geometry for layer {layer}.")
