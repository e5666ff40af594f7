"""MVTX pixel geometry."""

from . import segmentation
from .cylinder import CylinderGeomMvtx
