"""Global event characterization records (centrality, vertex, etc.)."""

from dataclasses import dataclass, field
from typing import List

import numpy as np

from .base import DataBase

__all__ = [
    "CentralityInfo",
    "GlobalVertex",
    "GlobalVertexMap",
    "MinimumBiasInfo",
    "MbdOut",
]


@dataclass(eq=False)
class CentralityInfo(DataBase):
    """Centrality of a heavy-ion event.

    Attributes
    ----------
    centile : float
        Centrality percentile (0 is the most central)
    impact_parameter : float
        Estimated impact parameter (fm)
    """

    centile: float = -1.0
    impact_parameter: float = -1.0


@dataclass(eq=False)
class GlobalVertex(DataBase):
    """Event vertex combined from the different vertex finders.

    Attributes
    ----------
    id : int
        Vertex index
    position : np.ndarray
        (3) Vertex position (cm)
    t : float
        Vertex time (ns)
    """

    id: int = 0
    position: np.ndarray = None
    t: float = 0.0

    _fixed_length_attrs = (("position", 3),)


@dataclass(eq=False)
class GlobalVertexMap(DataBase):
    """Vertices of one event.

    Attributes
    ----------
    vertices : List[GlobalVertex]
        List of vertices
    """

    vertices: List[GlobalVertex] = field(default_factory=list)

    def to_arrays(self):
        return {
            "id": np.array([v.id for v in self.vertices], dtype=np.int64),
            "position": np.array([v.position for v in self.vertices]).reshape(-1, 3),
            "t": np.array([v.t for v in self.vertices]),
        }

    @classmethod
    def from_arrays(cls, arrays):
        vertices = [
            GlobalVertex(id=int(i), position=np.array(p), t=float(t))
            for i, p, t in zip(arrays["id"], arrays["position"], arrays["t"])
        ]
        return cls(vertices=vertices)


@dataclass(eq=False)
class MinimumBiasInfo(DataBase):
    """Minimum-bias classification of an event.

    Attributes
    ----------
    is_min_bias : bool
        Whether the event passes the minimum-bias selection
    """

    is_min_bias: bool = False


@dataclass(eq=False)
class MbdOut(DataBase):
    """Summary of the minimum-bias detector response.

    Attributes
    ----------
    charge_sum : np.ndarray
        (2) Total charge in the south and north arms
    time : np.ndarray
        (2) Mean time of the south and north arms (ns)
    z_vertex : float
        Vertex position along the beam axis (cm)
    """

    charge_sum: np.ndarray = None
    time: np.ndarray = None
    z_vertex: float = 0.0

    _fixed_length_attrs = (("charge_sum", 2), ("time", 2))
