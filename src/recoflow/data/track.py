"""Reconstructed tracks and the states along their trajectory."""

from dataclasses import dataclass, field
from typing import Dict, List

import numpy as np

from .base import ContainerBase, DataBase

__all__ = ["TrackState", "SvtxTrack", "SvtxTrackMap"]


@dataclass(eq=False)
class TrackState(DataBase):
    """Fitted track parameters at one point along its trajectory.

    Attributes
    ----------
    path_length : float
        Path length from the vertex (0 for the vertex state itself)
    position : np.ndarray
        (3) Position of the state (cm)
    momentum : np.ndarray
        (3) Momentum of the track at the state (GeV/c)
    cluster_key : int
        Key of the cluster the state was evaluated at
    """

    path_length: float = 0.0
    position: np.ndarray = None
    momentum: np.ndarray = None
    cluster_key: int = 0

    _fixed_length_attrs = (("position", 3), ("momentum", 3))

    @property
    def x(self):
        return self.position[0]

    @property
    def y(self):
        return self.position[1]

    @property
    def z(self):
        return self.position[2]


@dataclass(eq=False)
class SvtxTrack(DataBase):
    """Reconstructed charged-particle track.

    Attributes
    ----------
    id : int
        Track index
    charge : int
        Track charge
    momentum : np.ndarray
        (3) Momentum at the vertex (GeV/c)
    states : List[TrackState]
        States along the trajectory, sorted by path length
    """

    id: int = -1
    charge: int = 0
    momentum: np.ndarray = None
    states: List[TrackState] = field(default_factory=list)

    _fixed_length_attrs = (("momentum", 3),)

    @property
    def positive_charge(self):
        return self.charge > 0

    @property
    def pt(self):
        return float(np.hypot(self.momentum[0], self.momentum[1]))

    @property
    def phi(self):
        return float(np.arctan2(self.momentum[1], self.momentum[0]))

    @property
    def eta(self):
        return float(np.arcsinh(self.momentum[2] / self.pt))

    def insert_state(self, state):
        """Insert a state, keeping the states sorted by path length.

        A state inserted at an existing path length replaces it.
        """
        self.states = [s for s in self.states if s.path_length != state.path_length]
        self.states.append(state)
        self.states.sort(key=lambda s: s.path_length)

    def cluster_keys(self):
        """Returns the keys of the clusters attached to the track."""
        return [s.cluster_key for s in self.states if s.path_length != 0]


class SvtxTrackMap(ContainerBase):
    """Tracks of one event, keyed by track index."""

    def __init__(self):
        self._tracks: Dict[int, SvtxTrack] = {}

    def size(self):
        return len(self._tracks)

    def reset(self):
        self._tracks.clear()

    def __iter__(self):
        return iter(sorted(self._tracks.items()))

    def insert(self, track):
        """Insert a track under its own index, or the next free one."""
        if track.id < 0:
            track.id = max(self._tracks) + 1 if self._tracks else 0
        self._tracks[track.id] = track

        return track

    def get(self, track_id):
        return self._tracks.get(track_id)

    def to_arrays(self):
        tracks = [t for _, t in self]
        states = [(t.id, s) for t in tracks for s in t.states]
        return {
            "track_id": np.array([t.id for t in tracks], dtype=np.int64),
            "charge": np.array([t.charge for t in tracks], dtype=np.int64),
            "momentum": np.array([t.momentum for t in tracks]).reshape(-1, 3),
            "state_track_id": np.array([i for i, _ in states], dtype=np.int64),
            "state_path_length": np.array([s.path_length for _, s in states]),
            "state_position": np.array([s.position for _, s in states]).reshape(-1, 3),
            "state_momentum": np.array([s.momentum for _, s in states]).reshape(-1, 3),
            "state_cluster_key": np.array(
                [s.cluster_key for _, s in states], dtype=np.uint64
            ),
        }

    @classmethod
    def from_arrays(cls, arrays):
        track_map = cls()
        for i, track_id in enumerate(arrays["track_id"]):
            track_map.insert(
                SvtxTrack(
                    id=int(track_id),
                    charge=int(arrays["charge"][i]),
                    momentum=np.array(arrays["momentum"][i]),
                )
            )
        for i, track_id in enumerate(arrays["state_track_id"]):
            track_map.get(int(track_id)).insert_state(
                TrackState(
                    path_length=float(arrays["state_path_length"][i]),
                    position=np.array(arrays["state_position"][i]),
                    momentum=np.array(arrays["state_momentum"][i]),
                    cluster_key=int(arrays["state_cluster_key"][i]),
                )
            )

        return track_map
