"""Tracking detector geometry.

Geometries are described by YAML files under `geo/config/<detector>/` and
loaded through :class:`GeoManager`.
"""

from .base import Geometry
from .factories import geo_factory
from .manager import GeoManager
from .mvtx import CylinderGeomMvtx
from .tpc import TpcGeomContainer

__all__ = [
    "Geometry",
    "GeoManager",
    "CylinderGeomMvtx",
    "TpcGeomContainer",
    "geo_factory",
]
