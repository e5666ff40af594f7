"""Geometry of one MVTX layer."""

from dataclasses import dataclass

import numpy as np

from recoflow.utils.globals import MVTX_CHIPS_PER_STAVE
from recoflow.utils.logger import logger

from . import segmentation as seg

__all__ = ["CylinderGeomMvtx"]

# Position of the sensor within its chip (cm)
SENSOR_IN_CHIP = np.array([0.058128, -0.0005, 0.0])

# Position of the chips along the stave (cm), chip 0 is closest to the connectors
CHIP_Z = np.linspace(-12.060, 12.060, MVTX_CHIPS_PER_STAVE)

# Tolerance used to keep positions on the edge inside the active matrix (cm)
EDGE_EPS = 5e-6


@dataclass
class CylinderGeomMvtx:
    """Geometry of one MVTX layer made of tilted staves of pixel chips.

    Attributes
    ----------
    layer : int
        Layer index
    n_staves : int
        Number of staves in the layer
    radius : float
        Nominal radius of the layer (cm)
    phi_step : float
        Azimuthal step between two consecutive staves
    phi_tilt : float
        Tilt of the staves w.r.t. the radial direction
    phi0 : float
        Azimuthal angle of stave 0
    """

    layer: int = 0
    n_staves: int = 0
    radius: float = 3.0
    phi_step: float = 0.0
    phi_tilt: float = 0.0
    phi0: float = 0.0

    @property
    def pixel_x(self):
        """Pixel pitch along the rows."""
        return seg.PITCH_ROW

    @property
    def pixel_z(self):
        """Pixel pitch along the columns."""
        return seg.PITCH_COL

    @property
    def pixel_thickness(self):
        return seg.SENSOR_LAYER_THICKNESS

    @property
    def nx(self):
        """Number of pixels along the local x axis (rows)."""
        return seg.NROWS

    @property
    def nz(self):
        """Number of pixels along the local z axis (columns)."""
        return seg.NCOLS

    def get_sensor_indices_from_world_coords(self, world):
        """Find the stave and chip a global position belongs to.

        Parameters
        ----------
        world : np.ndarray
            (3) Global position (cm)

        Returns
        -------
        int
            Stave index
        int
            Chip index
        """
        phi = np.arctan2(world[1], world[0])
        if phi < 0:
            phi += 2.0 * np.pi

        stave = int(round((phi - self.phi0) / self.phi_step))
        if self.n_staves > 0:
            stave %= self.n_staves

        chip_dz = (CHIP_Z[-1] - CHIP_Z[0]) / (MVTX_CHIPS_PER_STAVE - 1)
        chip = int(round(world[2] / chip_dz)) + MVTX_CHIPS_PER_STAVE // 2

        return stave, chip

    def get_pixel_from_local_coords(self, sensor_local):
        """Find the pixel a sensor-local position falls into.

        Positions within a tolerance of the active matrix edges are moved
        inside the matrix.

        Parameters
        ----------
        sensor_local : np.ndarray
            (3) Sensor-local position (cm)

        Returns
        -------
        bool
            True if the position falls within the active matrix
        int
            Row index (-1 if outside)
        int
            Column index (-1 if outside)
        """
        local = np.array(sensor_local, dtype=np.float64)
        half_rows = seg.ACTIVE_MATRIX_SIZE_ROWS / 2.0
        half_cols = seg.ACTIVE_MATRIX_SIZE_COLS / 2.0
        if abs(abs(local[0]) - half_rows) < EDGE_EPS:
            local[0] = np.copysign(half_rows - EDGE_EPS, local[0])
        if abs(abs(local[2]) - half_cols) < EDGE_EPS:
            local[2] = np.copysign(half_cols - EDGE_EPS, local[2])

        in_chip = local + SENSOR_IN_CHIP

        return seg.local_to_detector(in_chip[0], in_chip[2])

    def get_pixel_number_from_local_coords(self, sensor_local):
        """Linear index (row + column * nx) of the pixel at a local position.

        Positions outside of the sensor are logged and still return the index
        computed from the out-of-range row/column values.
        """
        valid, row, col = self.get_pixel_from_local_coords(sensor_local)
        if not valid:
            logger.warning(
                "Pixel is out of the sensor at local position %s.", list(sensor_local)
            )

        return self.get_pixel_number_from_xbin_zbin(row, col)

    def get_local_coords_from_pixel(self, row, col):
        """Sensor-local position of the center of a pixel.

        Parameters
        ----------
        row : int
            Row index
        col : int
            Column index

        Returns
        -------
        np.ndarray
            (3) Sensor-local position (cm)
        """
        valid, local = seg.detector_to_local(row, col)
        if not valid:
            logger.warning("Pixel coordinates (%d, %d) out of range.", row, col)

        return local - SENSOR_IN_CHIP

    def get_local_coords_from_pixel_number(self, pixel_number):
        """Sensor-local position of the center of a pixel given its linear index."""
        return self.get_local_coords_from_pixel(
            self.get_pixel_x_from_pixel_number(pixel_number),
            self.get_pixel_z_from_pixel_number(pixel_number),
        )

    def get_pixel_x_from_pixel_number(self, pixel_number):
        return pixel_number % self.nx

    def get_pixel_z_from_pixel_number(self, pixel_number):
        return pixel_number // self.nx

    def get_pixel_number_from_xbin_zbin(self, xbin, zbin):
        return xbin + zbin * self.nx

    def identify(self):
        """Returns a one-line description of the layer geometry."""
        return (
            f"CylinderGeomMvtx: layer: {self.layer}, radius: {self.radius}, "
            f"N_staves in layer: {self.n_staves}, pixel_x: {self.pixel_x}, "
            f"pixel_z: {self.pixel_z}, pixel_thickness: {self.pixel_thickness}"
        )
