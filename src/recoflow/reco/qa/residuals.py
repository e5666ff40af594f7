"""Histograms the residuals between track states and their clusters."""

from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from recoflow.data import SvtxTrackMap, TrkrClusterContainer
from recoflow.defs import trkr
from recoflow.hist import Hist1D, HistoManager
from recoflow.node import find_first, get_class
from recoflow.reco.base import SubsysReco
from recoflow.utils.enums import ReturnCode, TrkrId
from recoflow.utils.logger import logger

__all__ = ["StateClusterResidualsQA", "ResidualSelection"]


@dataclass
class ResidualSelection:
    """Track selection associated with one set of residual histograms.

    Attributes
    ----------
    name : str
        Prefix of the histogram names
    charge : int
        Required sign of the track charge (0 accepts both)
    min_mvtx_clusters, max_mvtx_clusters : int
        Accepted range of MVTX states on the track
    min_intt_clusters, max_intt_clusters : int
        Accepted range of INTT states on the track
    min_tpc_clusters, max_tpc_clusters : int
        Accepted range of TPC states on the track
    phi_min, phi_max : float
        Accepted azimuthal angle range
    eta_min, eta_max : float
        Accepted pseudorapidity range
    pt_min, pt_max : float
        Accepted transverse momentum range (GeV/c)
    """

    name: str = "h_StateClusterResidualsQA"
    charge: int = 0
    min_mvtx_clusters: int = 0
    max_mvtx_clusters: int = 3
    min_intt_clusters: int = 0
    max_intt_clusters: int = 4
    min_tpc_clusters: int = 0
    max_tpc_clusters: int = 48
    phi_min: float = -np.pi
    phi_max: float = np.pi
    eta_min: float = -1.1
    eta_max: float = 1.1
    pt_min: float = 0.0
    pt_max: float = np.inf

    def accept(self, track, counters):
        """Check whether a track passes the selection.

        Parameters
        ----------
        track : SvtxTrack
            Track to check
        counters : Dict[TrkrId, int]
            Number of states of the track in each subsystem

        Returns
        -------
        bool
            True if the track is selected
        """
        if self.charge < 0 and track.positive_charge:
            return False
        if self.charge > 0 and not track.positive_charge:
            return False

        return (
            self.min_mvtx_clusters <= counters[TrkrId.MVTX] <= self.max_mvtx_clusters
            and self.min_intt_clusters
            <= counters[TrkrId.INTT]
            <= self.max_intt_clusters
            and self.min_tpc_clusters <= counters[TrkrId.TPC] <= self.max_tpc_clusters
            and self.phi_min <= track.phi <= self.phi_max
            and self.eta_min <= track.eta <= self.eta_max
            and self.pt_min <= track.pt <= self.pt_max
        )


class StateClusterResidualsQA(SubsysReco):
    """Fills the state - cluster position residuals of selected tracks.

    For each selection, three histograms are booked in the shared
    :class:`HistoManager`: `<name>_x`, `<name>_y` and `<name>_z`.

    .. code-block:: yaml

        residuals:
          module: state_cluster_residuals_qa
          selections:
            - name: h_positive_tracks
              charge: 1
              min_tpc_clusters: 20
    """

    name = "state_cluster_residuals_qa"
    aliases = ("StateClusterResidualsQA",)

    def __init__(
        self,
        selections=None,
        track_map_name="SVTX_TRACK_MAP",
        cluster_container_name="TRKR_CLUSTER",
        geometry_node=None,
        num_bins=50,
        x_range=(-0.5, 0.5),
        y_range=(-0.5, 0.5),
        z_range=(-0.5, 0.5),
        **kwargs,
    ):
        """Initialize the QA module.

        Parameters
        ----------
        selections : List[dict], optional
            Track selection configurations. If not specified, a single
            selection with default cuts is used.
        track_map_name : str, default 'SVTX_TRACK_MAP'
            Name of the track map node
        cluster_container_name : str, default 'TRKR_CLUSTER'
            Name of the cluster container node
        geometry_node : str, optional
            Name of a geometry node which must exist for the run to proceed
        num_bins : int, default 50
            Number of bins of each residual histogram
        x_range, y_range, z_range : Tuple[float, float]
            Range of the residual histograms along each axis (cm)
        **kwargs : dict, optional
            Base module parameters
        """
        super().__init__(**kwargs)
        self.selections: List[ResidualSelection] = [
            ResidualSelection(**cfg) for cfg in (selections or [{}])
        ]
        names = [s.name for s in self.selections]
        if len(set(names)) != len(names):
            raise ValueError(f"Residual selection names must be unique: {names}")

        self.track_map_name = track_map_name
        self.cluster_container_name = cluster_container_name
        self.geometry_node: Optional[str] = geometry_node
        self.num_bins = num_bins
        self.ranges = {"x": x_range, "y": y_range, "z": z_range}
        self.hists = []

    def create_histos(self, manager):
        """Book the residual histograms of every selection."""
        for selection in self.selections:
            for axis, (low, high) in self.ranges.items():
                name = f"{selection.name}_{axis}"
                if name in manager:
                    continue
                manager.register(
                    Hist1D(
                        name,
                        f";State-Cluster {axis.upper()} Residual [cm];Entries",
                        self.num_bins,
                        low,
                        high,
                    )
                )

    def init_run(self, top_node):
        """Book the histograms and check that the input nodes exist.

        Returns
        -------
        ReturnCode
            `ABORTRUN` if any of the required nodes is missing
        """
        manager = HistoManager.instance()
        self.create_histos(manager)

        if get_class(top_node, self.track_map_name, SvtxTrackMap) is None:
            logger.error(
                "%s: Could not get track map: %s. Aborting.",
                self.name,
                self.track_map_name,
            )
            return ReturnCode.ABORTRUN

        clusters = get_class(
            top_node, self.cluster_container_name, TrkrClusterContainer
        )
        if clusters is None:
            logger.error(
                "%s: Could not get cluster map: %s. Aborting.",
                self.name,
                self.cluster_container_name,
            )
            return ReturnCode.ABORTRUN

        if (
            self.geometry_node is not None
            and find_first(top_node, self.geometry_node) is None
        ):
            logger.error(
                "%s: Could not get geometry: %s. Aborting.",
                self.name,
                self.geometry_node,
            )
            return ReturnCode.ABORTRUN

        self.hists = [
            tuple(manager.get(f"{s.name}_{axis}") for axis in self.ranges)
            for s in self.selections
        ]

        return ReturnCode.EVENT_OK

    def process_event(self, top_node):
        tracks = get_class(top_node, self.track_map_name, SvtxTrackMap)
        clusters = get_class(
            top_node, self.cluster_container_name, TrkrClusterContainer
        )
        if tracks is None or clusters is None:
            logger.error("%s: Missing track map or cluster container.", self.name)
            return ReturnCode.ABORTEVENT

        for _, track in tracks:
            # The vertex state sits at a path length of exactly 0
            counters = {trkr_id: 0 for trkr_id in TrkrId}
            states = [s for s in track.states if s.path_length != 0]
            for state in states:
                trkr_id = trkr.get_cluster_trkr_id(state.cluster_key)
                if trkr_id in counters:
                    counters[trkr_id] += 1

            for selection, hists in zip(self.selections, self.hists):
                if not selection.accept(track, counters):
                    continue

                for state in states:
                    cluster = clusters.find_cluster(state.cluster_key)
                    if cluster is None:
                        continue

                    residual = state.position - cluster.position
                    for hist, value in zip(hists, residual):
                        hist.fill(value)

        return ReturnCode.EVENT_OK
