"""Keys shared by all the tracking subsystems.

A hitset key is a 32-bit integer of the form:

.. code-block:: text

    | 31 ... 24 | 23 ... 16 | 15 ... 0             |
    | tracker   | layer     | subsystem-specific   |

A cluster key is a 64-bit integer which stores the hitset key in its upper
32 bits and the index of the cluster within its hitset in its lower 32 bits.
"""

from recoflow.utils.enums import TrkrId
from recoflow.utils.globals import (
    CLUSTER_INDEX_MASK,
    HITSET_KEY_SHIFT,
    LAYER_BITS,
    LAYER_SHIFT,
    TRKR_ID_BITS,
    TRKR_ID_SHIFT,
)

__all__ = [
    "gen_hitset_key",
    "get_trkr_id",
    "get_layer",
    "gen_cluster_key",
    "get_hitset_key",
    "get_cluster_index",
    "get_cluster_trkr_id",
    "get_cluster_layer",
]

TRKR_ID_MASK = (1 << TRKR_ID_BITS) - 1
LAYER_MASK = (1 << LAYER_BITS) - 1
TRKR_IDS = frozenset(int(t) for t in TrkrId)


def gen_hitset_key(trkr_id, layer):
    """Generate the base hitset key of a tracker layer.

    Parameters
    ----------
    trkr_id : Union[int, TrkrId]
        Tracker identifier
    layer : int
        Layer index

    Returns
    -------
    int
        Hitset key with empty subsystem-specific bits
    """
    if not 0 <= int(trkr_id) <= TRKR_ID_MASK:
        raise ValueError(f"Tracker ID out of range: {trkr_id}")
    if not 0 <= layer <= LAYER_MASK:
        raise ValueError(f"Layer out of range: {layer}")

    return (int(trkr_id) << TRKR_ID_SHIFT) | (layer << LAYER_SHIFT)


def get_trkr_id(hitset_key):
    """Tracker identifier of a hitset key.

    Parameters
    ----------
    hitset_key : int
        Hitset key

    Returns
    -------
    Union[TrkrId, int]
        Tracker identifier, as a plain integer if it is not a known subsystem
    """
    trkr_id = (hitset_key >> TRKR_ID_SHIFT) & TRKR_ID_MASK
    if trkr_id in TRKR_IDS:
        return TrkrId(trkr_id)

    return trkr_id


def get_layer(hitset_key):
    """Layer index of a hitset key."""
    return (hitset_key >> LAYER_SHIFT) & LAYER_MASK


def gen_cluster_key(hitset_key, index):
    """Generate a cluster key from its hitset key and its index in the hitset.

    Parameters
    ----------
    hitset_key : int
        Hitset key the cluster belongs to
    index : int
        Index of the cluster within its hitset

    Returns
    -------
    int
        64-bit cluster key
    """
    if not 0 <= index <= CLUSTER_INDEX_MASK:
        raise ValueError(f"Cluster index out of range: {index}")

    return (hitset_key << HITSET_KEY_SHIFT) | index


def get_hitset_key(cluster_key):
    """Hitset key of a cluster key."""
    return cluster_key >> HITSET_KEY_SHIFT


def get_cluster_index(cluster_key):
    """Index of a cluster within its hitset."""
    return cluster_key & CLUSTER_INDEX_MASK


def get_cluster_trkr_id(cluster_key):
    """Tracker identifier of a cluster key."""
    return get_trkr_id(get_hitset_key(cluster_key))


def get_cluster_layer(cluster_key):
    """Layer index of a cluster key."""
    return get_layer(get_hitset_key(cluster_key))
