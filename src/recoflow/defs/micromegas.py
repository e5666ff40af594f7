"""Micromegas-specific keys.

The lower 16 bits of a Micromegas hitset key store the segmentation type
(1 bit at offset 8) and the tile index (8 bits at offset 0). A hit key stores
the strip index (8 bits at offset 0) and the sample (16 bits at offset 8).
"""

from recoflow.utils.enums import SegmentationType, TrkrId

from . import trkr

__all__ = [
    "gen_hitset_key",
    "get_segmentation_type",
    "get_tile_id",
    "gen_hit_key",
    "get_strip",
    "get_sample",
]

SEGMENTATION_SHIFT, TILE_SHIFT = 8, 0
STRIP_SHIFT, SAMPLE_SHIFT = 0, 8


def gen_hitset_key(layer, segmentation, tile):
    """Generate a Micromegas hitset key.

    Parameters
    ----------
    layer : int
        Micromegas layer index
    segmentation : Union[int, SegmentationType]
        Strip orientation of the layer
    tile : int
        Tile index

    Returns
    -------
    int
        Hitset key
    """
    key = trkr.gen_hitset_key(TrkrId.MICROMEGAS, layer)
    key |= (int(segmentation) & 0x1) << SEGMENTATION_SHIFT
    key |= (tile & 0xFF) << TILE_SHIFT

    return key


def get_segmentation_type(hitset_key):
    """Strip orientation of a Micromegas hitset key."""
    return SegmentationType((hitset_key >> SEGMENTATION_SHIFT) & 0x1)


def get_tile_id(hitset_key):
    """Tile index of a Micromegas hitset key."""
    return (hitset_key >> TILE_SHIFT) & 0xFF


def gen_hit_key(strip, sample=0):
    """Generate a Micromegas hit key from a strip index and a sample."""
    return ((strip & 0xFF) << STRIP_SHIFT) | ((sample & 0xFFFF) << SAMPLE_SHIFT)


def get_strip(hit_key):
    return (hit_key >> STRIP_SHIFT) & 0xFF


def get_sample(hit_key):
    return (hit_key >> SAMPLE_SHIFT) & 0xFFFF
