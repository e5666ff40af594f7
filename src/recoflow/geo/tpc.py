"""Radial layout of the TPC readout layers."""

from dataclasses import dataclass
from typing import List

import numpy as np

from recoflow.utils.globals import (
    TPC_FIRST_LAYER,
    TPC_INNER_MIN_RADIUS,
    TPC_LAYERS_PER_REGION,
    TPC_MID_MIN_RADIUS,
    TPC_OUTER_MAX_RADIUS,
    TPC_OUTER_MIN_RADIUS,
)

__all__ = ["TpcGeomContainer"]


@dataclass
class TpcGeomContainer:
    """Radii of the TPC readout layers.

    The TPC is split in radial regions of equal-thickness layers. The radius
    of each layer is the center of its radial bin.

    Attributes
    ----------
    boundaries : List[float]
        Radial boundaries of the regions (cm), one more than the number of regions
    layers_per_region : int
        Number of readout layers in each region
    first_layer : int
        Global layer index of the innermost TPC layer
    """

    boundaries: List[float] = None
    layers_per_region: int = TPC_LAYERS_PER_REGION
    first_layer: int = TPC_FIRST_LAYER

    def __post_init__(self):
        if self.boundaries is None:
            self.boundaries = [
                TPC_INNER_MIN_RADIUS,
                TPC_MID_MIN_RADIUS,
                TPC_OUTER_MIN_RADIUS,
                TPC_OUTER_MAX_RADIUS,
            ]

        assert len(self.boundaries) > 1 and np.all(np.diff(self.boundaries) > 0), (
            "TPC region boundaries must be a strictly increasing list of at "
            "least two radii."
        )
        assert self.layers_per_region > 0, "Need at least one layer per region."

    @property
    def num_layers(self):
        return self.layers_per_region * (len(self.boundaries) - 1)

    @property
    def layer_radii(self) -> np.ndarray:
        """Radius of each readout layer, from the innermost outward.

        Returns
        -------
        np.ndarray
            (N) Layer radii (cm)
        """
        radii = []
        for low, high in zip(self.boundaries[:-1], self.boundaries[1:]):
            step = (high - low) / self.layers_per_region
            radii.append(low + step * (np.arange(self.layers_per_region) + 0.5))

        return np.concatenate(radii)

    def get_layer_radius(self, layer):
        """Radius of a TPC layer given its global layer index."""
        index = layer - self.first_layer
        if index < 0 or index >= self.num_layers:
            raise IndexError(f"Layer {layer} is not a TPC layer.")

        return self.layer_radii[index]

    def __iter__(self):
        """Iterates over (global layer, radius) pairs in increasing layer order."""
        for i, radius in enumerate(self.layer_radii):
            yield self.first_layer + i, radius

    def identify(self):
        return (
            f"TpcGeomContainer: {self.num_layers} layers starting at layer "
            f"{self.first_layer}, regions {list(self.boundaries)}"
        )
