"""Tracker hits, clusters and the containers which own them.

All containers are keyed by the packed integers defined in
:mod:`recoflow.defs`. Iteration over a container always follows increasing
key order.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np

from recoflow.defs import trkr

from .base import ContainerBase, DataBase

__all__ = [
    "TrkrHit",
    "TrkrHitSet",
    "TrkrHitSetContainer",
    "TrkrCluster",
    "TrkrClusterContainer",
    "TrkrClusterHitAssoc",
]


@dataclass(eq=False)
class TrkrHit(DataBase):
    """Single readout channel with a signal above threshold.

    Attributes
    ----------
    adc : int
        Digitized charge of the hit
    """

    adc: int = 0


class TrkrHitSet:
    """Hits which belong to one readout unit (chip, sector, tile).

    Attributes
    ----------
    hitset_key : int
        Key of the readout unit
    """

    def __init__(self, hitset_key=0):
        self.hitset_key = hitset_key
        self._hits: Dict[int, TrkrHit] = {}

    def __len__(self):
        return len(self._hits)

    def size(self):
        return len(self._hits)

    def add_hit(self, hit_key, hit):
        """Add a hit under a specific key.

        If a hit already exists under this key, it is kept and returned.

        Parameters
        ----------
        hit_key : int
            Hit key
        hit : TrkrHit
            Hit to add

        Returns
        -------
        TrkrHit
            Hit stored under the key
        """
        return self._hits.setdefault(hit_key, hit)

    def get_hit(self, hit_key) -> Optional[TrkrHit]:
        return self._hits.get(hit_key)

    def remove_hit(self, hit_key):
        self._hits.pop(hit_key, None)

    def get_hits(self) -> List[Tuple[int, TrkrHit]]:
        """Returns the (hit key, hit) pairs sorted by hit key."""
        return sorted(self._hits.items())

    def identify(self):
        return f"TrkrHitSet {self.hitset_key} with {self.size()} hits"


class TrkrHitSetContainer(ContainerBase):
    """Hitsets of all the tracking subsystems, keyed by hitset key."""

    def __init__(self):
        self._hitsets: Dict[int, TrkrHitSet] = {}

    def size(self):
        return len(self._hitsets)

    def reset(self):
        self._hitsets.clear()

    def find_or_add_hit_set(self, hitset_key):
        """Returns the hitset stored under a key, creating it if needed."""
        if hitset_key not in self._hitsets:
            self._hitsets[hitset_key] = TrkrHitSet(hitset_key)

        return self._hitsets[hitset_key]

    def find_hit_set(self, hitset_key) -> Optional[TrkrHitSet]:
        return self._hitsets.get(hitset_key)

    def remove_hit_set(self, hitset_key):
        self._hitsets.pop(hitset_key, None)

    def get_hit_sets(self, trkr_id=None) -> List[Tuple[int, TrkrHitSet]]:
        """Returns the (hitset key, hitset) pairs, sorted by key.

        Parameters
        ----------
        trkr_id : TrkrId, optional
            If specified, only return the hitsets of this subsystem

        Returns
        -------
        List[Tuple[int, TrkrHitSet]]
            List of (hitset key, hitset) pairs
        """
        return [
            (key, hitset)
            for key, hitset in sorted(self._hitsets.items())
            if trkr_id is None or trkr.get_trkr_id(key) == trkr_id
        ]

    def to_arrays(self):
        hitset_keys, hit_keys, adcs = [], [], []
        for key, hitset in self.get_hit_sets():
            for hit_key, hit in hitset.get_hits():
                hitset_keys.append(key)
                hit_keys.append(hit_key)
                adcs.append(hit.adc)

        return {
            "hitset_key": np.array(hitset_keys, dtype=np.uint32),
            "hit_key": np.array(hit_keys, dtype=np.uint32),
            "adc": np.array(adcs, dtype=np.int64),
        }

    @classmethod
    def from_arrays(cls, arrays):
        container = cls()
        for key, hit_key, adc in zip(
            arrays["hitset_key"], arrays["hit_key"], arrays["adc"]
        ):
            hitset = container.find_or_add_hit_set(int(key))
            hitset.add_hit(int(hit_key), TrkrHit(adc=int(adc)))

        return container


@dataclass(eq=False)
class TrkrCluster(DataBase):
    """Group of adjacent hits within one readout unit.

    Attributes
    ----------
    local_x : float
        Position along the first local axis of the readout surface (cm)
    local_y : float
        Position along the second local axis of the readout surface (cm)
    position : np.ndarray
        (3) Global position of the cluster (cm)
    size : int
        Number of hits in the cluster
    phi_size : int
        Extent of the cluster along the azimuthal direction (in channels)
    z_size : int
        Extent of the cluster along the beam direction (in channels)
    adc : int
        Total charge of the cluster
    """

    local_x: float = 0.0
    local_y: float = 0.0
    position: np.ndarray = None
    size: int = 0
    phi_size: int = 0
    z_size: int = 0
    adc: int = 0

    _fixed_length_attrs = (("position", 3),)


class TrkrClusterContainer(ContainerBase):
    """Clusters of all the tracking subsystems, keyed by cluster key."""

    _attrs = ("local_x", "local_y", "size", "phi_size", "z_size", "adc")

    def __init__(self):
        self._clusters: Dict[int, Dict[int, TrkrCluster]] = {}

    def size(self):
        return sum(len(c) for c in self._clusters.values())

    def reset(self):
        self._clusters.clear()

    def __iter__(self):
        for key in self.get_hit_set_keys():
            yield from self.get_clusters(key)

    def add_cluster(self, cluster_key, cluster):
        """Add a cluster under a specific key.

        Parameters
        ----------
        cluster_key : int
            Cluster key
        cluster : TrkrCluster
            Cluster to add

        Returns
        -------
        TrkrCluster
            Cluster stored under the key (the existing one if any)
        """
        clusters = self._clusters.setdefault(trkr.get_hitset_key(cluster_key), {})
        return clusters.setdefault(trkr.get_cluster_index(cluster_key), cluster)

    def add_cluster_to_hit_set(self, hitset_key, cluster):
        """Add a cluster to a hitset under the next available index.

        Returns
        -------
        int
            Key of the new cluster
        """
        clusters = self._clusters.setdefault(hitset_key, {})
        index = max(clusters) + 1 if clusters else 0
        clusters[index] = cluster

        return trkr.gen_cluster_key(hitset_key, index)

    def find_cluster(self, cluster_key) -> Optional[TrkrCluster]:
        clusters = self._clusters.get(trkr.get_hitset_key(cluster_key), {})
        return clusters.get(trkr.get_cluster_index(cluster_key))

    def remove_cluster(self, cluster_key):
        """Remove a cluster, if it exists."""
        hitset_key = trkr.get_hitset_key(cluster_key)
        clusters = self._clusters.get(hitset_key)
        if clusters is not None:
            clusters.pop(trkr.get_cluster_index(cluster_key), None)
            if not clusters:
                del self._clusters[hitset_key]

    def get_hit_set_keys(self, trkr_id=None, layer=None) -> List[int]:
        """Returns the sorted list of hitset keys which own clusters.

        Parameters
        ----------
        trkr_id : TrkrId, optional
            If specified, only return the hitset keys of this subsystem
        layer : int, optional
            If specified, only return the hitset keys of this layer

        Returns
        -------
        List[int]
            Sorted list of hitset keys
        """
        return [
            key
            for key in sorted(self._clusters)
            if (trkr_id is None or trkr.get_trkr_id(key) == trkr_id)
            and (layer is None or trkr.get_layer(key) == layer)
        ]

    def get_clusters(self, hitset_key) -> List[Tuple[int, TrkrCluster]]:
        """Returns the (cluster key, cluster) pairs of one hitset, sorted."""
        clusters = self._clusters.get(hitset_key, {})
        return [
            (trkr.gen_cluster_key(hitset_key, index), clusters[index])
            for index in sorted(clusters)
        ]

    def to_arrays(self):
        items = list(self)
        arrays = {"cluster_key": np.array([k for k, _ in items], dtype=np.uint64)}
        for attr in self._attrs:
            arrays[attr] = np.array([getattr(c, attr) for _, c in items])
        arrays["position"] = np.array(
            [c.position for _, c in items], dtype=np.float64
        ).reshape(-1, 3)

        return arrays

    @classmethod
    def from_arrays(cls, arrays):
        container = cls()
        for i, key in enumerate(arrays["cluster_key"]):
            kwargs = {attr: arrays[attr][i].item() for attr in cls._attrs}
            cluster = TrkrCluster(position=np.array(arrays["position"][i]), **kwargs)
            container.add_cluster(int(key), cluster)

        return container


class TrkrClusterHitAssoc(ContainerBase):
    """Association between each cluster and the hits it was built from."""

    def __init__(self):
        self._map: Dict[int, List[int]] = {}

    def size(self):
        return sum(len(h) for h in self._map.values())

    def reset(self):
        self._map.clear()

    def add_assoc(self, cluster_key, hit_key):
        self._map.setdefault(cluster_key, []).append(hit_key)

    def get_hits(self, cluster_key) -> List[int]:
        """Returns the list of hit keys associated with a cluster."""
        return list(self._map.get(cluster_key, ()))

    def remove_assoc(self, cluster_key):
        self._map.pop(cluster_key, None)

    def to_arrays(self):
        cluster_keys, hit_keys = [], []
        for key in sorted(self._map):
            for hit_key in self._map[key]:
                cluster_keys.append(key)
                hit_keys.append(hit_key)

        return {
            "cluster_key": np.array(cluster_keys, dtype=np.uint64),
            "hit_key": np.array(hit_keys, dtype=np.uint32),
        }

    @classmethod
    def from_arrays(cls, arrays):
        assoc = cls()
        for key, hit_key in zip(arrays["cluster_key"], arrays["hit_key"]):
            assoc.add_assoc(int(key), int(hit_key))

        return assoc
