"""Segmentation of the ALPIDE monolithic pixel sensor.

Positions are expressed in chip-local coordinates (cm): `x` runs along the
rows and `z` along the columns. Row 0 is the farthest from the periphery
(read-out) edge of the chip.
"""

import numpy as np

__all__ = ["local_to_detector", "detector_to_local", "describe"]

# Pixel matrix
NCOLS = 1024
NROWS = 512
NPIXELS = NROWS * NCOLS

# Pixel pitch (cm)
PITCH_COL = 29.24e-4
PITCH_ROW = 26.88e-4

# Passive edges of the sensor (cm)
PASSIVE_EDGE_READOUT = 0.12
PASSIVE_EDGE_TOP = 37.44e-4
PASSIVE_EDGE_SIDE = 29.12e-4

# Sensor dimensions (cm)
ACTIVE_MATRIX_SIZE_COLS = PITCH_COL * NCOLS
ACTIVE_MATRIX_SIZE_ROWS = PITCH_ROW * NROWS
SENSOR_LAYER_THICKNESS = 30.0e-4
SENSOR_SIZE_COLS = ACTIVE_MATRIX_SIZE_COLS + PASSIVE_EDGE_SIDE + PASSIVE_EDGE_SIDE
SENSOR_SIZE_ROWS = ACTIVE_MATRIX_SIZE_ROWS + PASSIVE_EDGE_TOP + PASSIVE_EDGE_READOUT

# Offset between the chip-local origin and the row axis origin
_ROW_OFFSET = 0.5 * (ACTIVE_MATRIX_SIZE_ROWS - PASSIVE_EDGE_TOP + PASSIVE_EDGE_READOUT)


def local_to_detector(x, z):
    """Convert a chip-local position to the pixel it falls into.

    Parameters
    ----------
    x : float
        Position along the rows (cm)
    z : float
        Position along the columns (cm)

    Returns
    -------
    bool
        True if the position falls within the active matrix
    int
        Row index (-1 if outside)
    int
        Column index (-1 if outside)
    """
    x_row = _ROW_OFFSET - x
    z_col = z + 0.5 * ACTIVE_MATRIX_SIZE_COLS
    if (
        x_row < 0
        or x_row >= ACTIVE_MATRIX_SIZE_ROWS
        or z_col < 0
        or z_col >= ACTIVE_MATRIX_SIZE_COLS
    ):
        return False, -1, -1

    return True, int(x_row / PITCH_ROW), int(z_col / PITCH_COL)


def detector_to_local(row, col):
    """Convert a pixel to the chip-local position of its center.

    The position is computed even if the pixel is out of range.

    Parameters
    ----------
    row : Union[int, float]
        Row index
    col : Union[int, float]
        Column index

    Returns
    -------
    bool
        True if the pixel is within the matrix
    np.ndarray
        (3) Chip-local position (x, y, z) of the pixel center (cm)
    """
    x = _ROW_OFFSET - 0.5 * PITCH_ROW - row * PITCH_ROW
    z = col * PITCH_COL + 0.5 * (PITCH_COL - ACTIVE_MATRIX_SIZE_COLS)
    valid = 0 <= row < NROWS and 0 <= col < NCOLS

    return valid, np.array([x, 0.0, z])


def describe():
    """Returns a text summary of the sensor segmentation."""
    return (
        f"Pixel size: {PITCH_ROW * 1e4:.2f} (along {NROWS} rows) "
        f"{PITCH_COL * 1e4:.2f} (along {NCOLS} columns) microns\n"
        f"Passive edges: bottom: {PASSIVE_EDGE_READOUT * 1e4:.2f}, "
        f"top: {PASSIVE_EDGE_TOP * 1e4:.2f}, "
        f"left/right: {PASSIVE_EDGE_SIDE * 1e4:.2f} microns\n"
        f"Active/Total size: {ACTIVE_MATRIX_SIZE_ROWS:.6f}/{SENSOR_SIZE_ROWS:.6f} "
        f"(rows) {ACTIVE_MATRIX_SIZE_COLS:.6f}/{SENSOR_SIZE_COLS:.6f} (cols) cm"
    )
