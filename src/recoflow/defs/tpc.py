"""TPC-specific keys.

The lower 16 bits of a TPC hitset key store the sector (8 bits at offset 8)
and the side (8 bits at offset 0). A TPC hit key stores the pad index in its
upper 16 bits and the time bin in its lower 16 bits.
"""

from recoflow.utils.enums import TrkrId
from recoflow.utils.globals import TPC_LAYERS

from . import trkr

__all__ = [
    "gen_hitset_key",
    "get_sector_id",
    "get_side",
    "gen_hit_key",
    "get_pad",
    "get_tbin",
]

SECTOR_SHIFT, SIDE_SHIFT, MASK_8 = 8, 0, 0xFF
PAD_SHIFT, TBIN_SHIFT, MASK_16 = 16, 0, 0xFFFF


def gen_hitset_key(layer, sector, side):
    """Generate a TPC hitset key.

    Parameters
    ----------
    layer : int
        TPC readout layer (7 to 54)
    sector : int
        Sector index
    side : int
        TPC side (0 for the south side, 1 for the north side)

    Returns
    -------
    int
        Hitset key
    """
    if not TPC_LAYERS[0] <= layer <= TPC_LAYERS[1]:
        raise ValueError(f"TPC layer out of range {TPC_LAYERS}: {layer}")

    key = trkr.gen_hitset_key(TrkrId.TPC, layer)
    key |= (sector & MASK_8) << SECTOR_SHIFT
    key |= (side & MASK_8) << SIDE_SHIFT

    return key


def get_sector_id(hitset_key):
    return (hitset_key >> SECTOR_SHIFT) & MASK_8


def get_side(hitset_key):
    return (hitset_key >> SIDE_SHIFT) & MASK_8


def gen_hit_key(pad, tbin):
    """Generate a TPC hit key from a pad index and a time bin."""
    return ((pad & MASK_16) << PAD_SHIFT) | ((tbin & MASK_16) << TBIN_SHIFT)


def get_pad(hit_key):
    return (hit_key >> PAD_SHIFT) & MASK_16


def get_tbin(hit_key):
    return (hit_key >> TBIN_SHIFT) & MASK_16
