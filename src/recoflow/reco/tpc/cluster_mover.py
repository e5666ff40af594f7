"""Moves the TPC clusters of a track onto their readout layer surfaces.

TPC clusters are reconstructed at the position of the ionization after
distortion corrections, which does not coincide with the nominal radius of
the readout layer they were assigned to. The mover fits the track in the
transverse plane (circle) and in the (r, z) plane (line), then slides each
cluster along the fitted trajectory from its own radius to the radius of its
readout layer.
"""

import numpy as np

from recoflow.data import SvtxTrackMap, TrkrClusterContainer
from recoflow.defs import trkr
from recoflow.geo import TpcGeomContainer
from recoflow.math.fit import circle_circle_intersection, circle_fit_by_taubin, line_fit
from recoflow.node import get_class
from recoflow.reco.base import SubsysReco
from recoflow.utils.enums import ReturnCode, TrkrId
from recoflow.utils.globals import INTERSECTION_TOLERANCE, TPC_FIRST_LAYER
from recoflow.utils.logger import logger

__all__ = ["TpcClusterMover", "TpcClusterMoverReco"]


class TpcClusterMover:
    """Projects TPC clusters of a track onto their readout layer radii.

    Attributes
    ----------
    layer_radius : np.ndarray
        (48) Radius of each TPC readout layer (cm), starting at layer 7
    verbosity : int
        Verbosity level
    """

    def __init__(self, verbosity=0):
        """Initialize the layer radii to their default values.

        Parameters
        ----------
        verbosity : int, default 0
            Verbosity level
        """
        self.verbosity = verbosity
        self.layer_radius = TpcGeomContainer().layer_radii

    def initialize_geometry(self, geom):
        """Overwrite the layer radii from a TPC geometry container.

        Parameters
        ----------
        geom : TpcGeomContainer
            TPC geometry, its layers are read in increasing layer order
        """
        if self.verbosity > 0:
            logger.info("TpcClusterMover: Initializing layer radii from geometry.")

        self.layer_radius = np.array([radius for _, radius in geom], dtype=np.float64)

    def process_track(self, global_in):
        """Move the TPC clusters of one track onto their readout layers.

        Parameters
        ----------
        global_in : List[Tuple[int, np.ndarray]]
            (cluster key, (3) global position) of every cluster on the track

        Returns
        -------
        List[Tuple[int, np.ndarray]]
            Non-TPC clusters unchanged (input order), followed by the moved
            TPC clusters. TPC clusters which cannot be projected are dropped.
            If the track has fewer than three TPC clusters, the input is
            returned unchanged.
        """
        global_moved = []
        tpc_keys, tpc_points = [], []
        for key, position in global_in:
            if trkr.get_cluster_trkr_id(key) == TrkrId.TPC:
                tpc_keys.append(key)
                tpc_points.append(position)
            else:
                global_moved.append((key, position))

        # Need at least 3 clusters to fit a circle
        if len(tpc_points) < 3:
            if self.verbosity > 0:
                logger.info(
                    "Skip this TPC track, not enough clusters: %d", len(tpc_points)
                )
            return global_in

        points = np.asarray(tpc_points, dtype=np.float64)
        radius, x0, y0 = circle_fit_by_taubin(points)
        slope, intercept = line_fit(points)

        for key, point in zip(tpc_keys, points):
            index = trkr.get_cluster_layer(key) - TPC_FIRST_LAYER
            if not 0 <= index < len(self.layer_radius):
                logger.warning(
                    "TpcClusterMover: no readout layer for cluster %d, dropped.", key
                )
                continue

            # Circle position at the target surface radius
            target_radius = self.layer_radius[index]
            proj = self.get_circle_circle_intersection(
                target_radius, radius, x0, y0, point[0], point[1]
            )
            if proj is None:
                continue
            z_proj = intercept + slope * target_radius

            # Circle position at the cluster radius
            cluster_radius = np.hypot(point[0], point[1])
            start = self.get_circle_circle_intersection(
                cluster_radius, radius, x0, y0, point[0], point[1]
            )
            if start is None:
                continue
            z_start = intercept + slope * cluster_radius

            moved = np.array(
                [
                    point[0] - (start[0] - proj[0]),
                    point[1] - (start[1] - proj[1]),
                    point[2] - (z_start - z_proj),
                ]
            )
            global_moved.append((key, moved))

            if self.verbosity > 2:
                logger.info(
                    "Cluster %d layer %d, layer radius %.4f, cluster radius %.4f\n"
                    "  global in  %s\n  global new %s",
                    key,
                    layer,
                    target_radius,
                    cluster_radius,
                    point,
                    moved,
                )

        return global_moved

    def get_circle_circle_intersection(
        self, target_radius, radius, x0, y0, x_clus, y_clus
    ):
        """Intersection of the fitted circle with a cylinder, closest to a cluster.

        Parameters
        ----------
        target_radius : float
            Radius of the cylinder centered on the beam axis
        radius : float
            Radius of the fitted circle
        x0 : float
            x coordinate of the fitted circle center
        y0 : float
            y coordinate of the fitted circle center
        x_clus : float
            x coordinate of the cluster
        y_clus : float
            y coordinate of the cluster

        Returns
        -------
        Tuple[float, float]
            Selected (x, y) intersection, None if the circles do not intersect
        """
        x_plus, y_plus, x_minus, y_minus = circle_circle_intersection(
            target_radius, radius, x0, y0
        )
        if np.isnan(x_plus):
            if self.verbosity > 1:
                logger.info(
                    "Circle/circle intersection failed, skip this cluster: "
                    "target radius %f, fitted R %f, X0 %f, Y0 %f",
                    target_radius,
                    radius,
                    x0,
                    y0,
                )
            return None

        if (
            abs(x_clus - x_plus) < INTERSECTION_TOLERANCE
            and abs(y_clus - y_plus) < INTERSECTION_TOLERANCE
        ):
            return x_plus, y_plus

        return x_minus, y_minus


class TpcClusterMoverReco(SubsysReco):
    """Applies the TPC cluster mover to every reconstructed track.

    The moved cluster positions of each track are stored in the
    `TPC_MOVED_CLUSTERS` node under `DST`, as a dictionary which maps each
    track id onto its list of (cluster key, global position).
    """

    name = "tpc_cluster_mover"
    aliases = ("TpcClusterMover",)

    def __init__(self, output_node="TPC_MOVED_CLUSTERS", **kwargs):
        """Initialize the module.

        Parameters
        ----------
        output_node : str, default 'TPC_MOVED_CLUSTERS'
            Name of the output node
        **kwargs : dict, optional
            Base module parameters
        """
        super().__init__(**kwargs)
        self.output_node = output_node
        self.mover = TpcClusterMover(verbosity=self.verbosity)

    def init_run(self, top_node):
        """Load the TPC layer radii from the run tree, if available."""
        geom = get_class(top_node, "TPCGEOMCONTAINER", TpcGeomContainer)
        if geom is not None:
            self.mover.initialize_geometry(geom)
        else:
            logger.warning(
                "%s: TPCGEOMCONTAINER not found, using default layer radii.",
                self.name,
            )

        return ReturnCode.EVENT_OK

    def process_event(self, top_node):
        tracks = get_class(top_node, "SVTX_TRACK_MAP", SvtxTrackMap)
        clusters = get_class(top_node, "TRKR_CLUSTER", TrkrClusterContainer)
        if tracks is None or clusters is None:
            logger.error(
                "%s: Missing SVTX_TRACK_MAP or TRKR_CLUSTER, abort event.", self.name
            )
            return ReturnCode.ABORTEVENT

        moved = {}
        for _, track in tracks:
            global_in = []
            for key in track.cluster_keys():
                cluster = clusters.find_cluster(key)
                if cluster is not None:
                    global_in.append((key, cluster.position))

            moved[track.id] = self.mover.process_track(global_in)

        dst = top_node.child("DST")
        dst.remove_node(self.output_node)
        dst.add_data(self.output_node, moved, persistent=False)

        return ReturnCode.EVENT_OK
