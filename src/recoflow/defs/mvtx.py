"""MVTX-specific keys.

The lower 16 bits of an MVTX hitset key encode the stave (6 bits at offset
10), the chip (5 bits at offset 5) and the readout strobe (5 bits at offset
0). The strobe is signed and stored with an offset of 16, which gives a valid
range of [-16, 15].

An MVTX hit key stores the pixel column in its upper 16 bits and the pixel
row in its lower 16 bits.
"""

from recoflow.utils.enums import TrkrId

from . import trkr

__all__ = [
    "gen_hitset_key",
    "get_stave_id",
    "get_chip_id",
    "get_strobe_id",
    "reset_strobe",
    "gen_hit_key",
    "get_col",
    "get_row",
]

STAVE_SHIFT, STAVE_MASK = 10, 0x3F
CHIP_SHIFT, CHIP_MASK = 5, 0x1F
STROBE_SHIFT, STROBE_MASK = 0, 0x1F
STROBE_OFFSET = 16

COL_SHIFT, ROW_SHIFT, HIT_MASK = 16, 0, 0xFFFF


def gen_hitset_key(layer, stave, chip, strobe=0):
    """Generate an MVTX hitset key.

    Parameters
    ----------
    layer : int
        MVTX layer index
    stave : int
        Stave index within the layer
    chip : int
        Chip index within the stave
    strobe : int, default 0
        Readout strobe, relative to the triggered one

    Returns
    -------
    int
        Hitset key
    """
    if not 0 <= stave <= STAVE_MASK:
        raise ValueError(f"MVTX stave out of range: {stave}")
    if not 0 <= chip <= CHIP_MASK:
        raise ValueError(f"MVTX chip out of range: {chip}")
    if not -STROBE_OFFSET <= strobe < STROBE_OFFSET:
        raise ValueError(f"MVTX strobe out of range [-16, 15]: {strobe}")

    key = trkr.gen_hitset_key(TrkrId.MVTX, layer)
    key |= stave << STAVE_SHIFT
    key |= chip << CHIP_SHIFT
    key |= (strobe + STROBE_OFFSET) << STROBE_SHIFT

    return key


def get_stave_id(hitset_key):
    """Stave index of an MVTX hitset key."""
    return (hitset_key >> STAVE_SHIFT) & STAVE_MASK


def get_chip_id(hitset_key):
    """Chip index of an MVTX hitset key."""
    return (hitset_key >> CHIP_SHIFT) & CHIP_MASK


def get_strobe_id(hitset_key):
    """Signed strobe of an MVTX hitset key."""
    return ((hitset_key >> STROBE_SHIFT) & STROBE_MASK) - STROBE_OFFSET


def reset_strobe(hitset_key):
    """Returns the key of the same chip in the triggered strobe (strobe 0)."""
    return gen_hitset_key(
        trkr.get_layer(hitset_key),
        get_stave_id(hitset_key),
        get_chip_id(hitset_key),
        0,
    )


def gen_hit_key(col, row):
    """Generate an MVTX hit key from a pixel column and row."""
    if not (0 <= col <= HIT_MASK and 0 <= row <= HIT_MASK):
        raise ValueError(f"MVTX pixel out of range: col={col}, row={row}")

    return (col << COL_SHIFT) | (row << ROW_SHIFT)


def get_col(hit_key):
    """Pixel column of an MVTX hit key."""
    return (hit_key >> COL_SHIFT) & HIT_MASK


def get_row(hit_key):
    """Pixel row of an MVTX hit key."""
    return (hit_key >> ROW_SHIFT) & HIT_MASK
