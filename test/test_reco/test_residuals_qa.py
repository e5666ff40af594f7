"""Tests of the state/cluster residual QA module."""

import numpy as np
import pytest

from recoflow.data import (
    SvtxTrack,
    SvtxTrackMap,
    TrackState,
    TrkrCluster,
    TrkrClusterContainer,
)
from recoflow.defs import mvtx, tpc, trkr
from recoflow.hist import HistoManager
from recoflow.reco.qa import ResidualSelection, StateClusterResidualsQA
from recoflow.utils.enums import ReturnCode, TrkrId


def make_track(charge, positions, keys):
    """Track with a vertex state and one state per cluster."""
    track = SvtxTrack(charge=charge, momentum=[1.0, 0.0, 0.0])
    track.insert_state(TrackState(path_length=0.0, position=np.zeros(3)))
    for i, (position, key) in enumerate(zip(positions, keys)):
        track.insert_state(
            TrackState(path_length=i + 1.0, position=position, cluster_key=key)
        )

    return track


@pytest.fixture(name="event")
def fixture_event(top_node):
    """One positive and one negative track, each with two TPC clusters."""
    clusters = TrkrClusterContainer()
    tracks = SvtxTrackMap()
    for charge, layer in ((1, 10), (-1, 20)):
        keys, states = [], []
        for offset in (0, 1):
            hitset_key = tpc.gen_hitset_key(layer + offset, 0, 0)
            position = np.array([40.0 + offset, 0.0, 1.0])
            cluster = TrkrCluster(position=position)
            keys.append(clusters.add_cluster_to_hit_set(hitset_key, cluster))
            states.append(position + np.array([0.1, -0.2, 0.05]))
        tracks.insert(make_track(charge, states, keys))

    top_node.child("DST").add_data("SVTX_TRACK_MAP", tracks)
    top_node.child("DST").add_data("TRKR_CLUSTER", clusters)

    return tracks, clusters


class TestResidualSelection:
    """Test the track selection."""

    def test_charge(self):
        counters = {trkr_id: 0 for trkr_id in TrkrId}
        positive = SvtxTrack(charge=1, momentum=[1.0, 0.0, 0.0])
        negative = SvtxTrack(charge=-1, momentum=[1.0, 0.0, 0.0])

        assert ResidualSelection(charge=1).accept(positive, counters)
        assert not ResidualSelection(charge=1).accept(negative, counters)
        assert ResidualSelection(charge=-1).accept(negative, counters)
        assert ResidualSelection().accept(negative, counters)

    def test_cluster_counts(self):
        track = SvtxTrack(charge=1, momentum=[1.0, 0.0, 0.0])
        counters = {trkr_id: 0 for trkr_id in TrkrId}
        counters[TrkrId.TPC] = 10

        assert not ResidualSelection(min_tpc_clusters=20).accept(track, counters)
        assert ResidualSelection(max_tpc_clusters=10).accept(track, counters)

    def test_kinematics(self):
        counters = {trkr_id: 0 for trkr_id in TrkrId}
        track = SvtxTrack(charge=1, momentum=[0.0, 2.0, 0.0])

        assert not ResidualSelection(pt_max=1.0).accept(track, counters)
        assert not ResidualSelection(phi_max=1.0).accept(track, counters)
        assert ResidualSelection(eta_min=-0.1, eta_max=0.1).accept(track, counters)


class TestStateClusterResidualsQA:
    """Test the booking and filling of the residual histograms."""

    def test_duplicate_names(self):
        with pytest.raises(ValueError):
            StateClusterResidualsQA(selections=[{"name": "h"}, {"name": "h"}])

    def test_missing_nodes(self, top_node):
        """The run is aborted if the inputs are missing."""
        module = StateClusterResidualsQA()

        assert module.init_run(top_node) == ReturnCode.ABORTRUN
        assert "h_StateClusterResidualsQA_x" in HistoManager.instance()

    def test_missing_geometry(self, top_node, event):
        module = StateClusterResidualsQA(geometry_node="ActsGeometry")

        assert module.init_run(top_node) == ReturnCode.ABORTRUN

    def test_fill(self, top_node, event):
        """Residuals of the selected tracks are histogrammed, per selection."""
        module = StateClusterResidualsQA(
            selections=[{"name": "h_all"}, {"name": "h_pos", "charge": 1}]
        )

        assert module.init_run(top_node) == ReturnCode.EVENT_OK
        assert module.process_event(top_node) == ReturnCode.EVENT_OK

        manager = HistoManager.instance()
        assert len(manager) == 6
        assert manager.get("h_all_x").entries == 4
        assert manager.get("h_pos_x").entries == 2
        assert manager.get("h_all_x").mean() == pytest.approx(0.1, abs=0.02)
        assert manager.get("h_all_y").mean() == pytest.approx(-0.2, abs=0.02)
        assert manager.get("h_pos_z").integral() == 2

    def test_skip_unknown_clusters(self, top_node, event):
        """States pointing to missing clusters are skipped."""
        tracks, _ = event
        key = trkr.gen_cluster_key(mvtx.gen_hitset_key(0, 0, 0), 0)
        tracks.insert(make_track(1, [np.ones(3)], [key]))
        module = StateClusterResidualsQA()

        module.init_run(top_node)
        module.process_event(top_node)

        assert HistoManager.instance().get("h_StateClusterResidualsQA_x").entries == 4

    def test_unset_positions(self, top_node):
        """States and clusters without a position fill the overflow bins."""
        clusters = TrkrClusterContainer()
        hitset_key = tpc.gen_hitset_key(10, 0, 0)
        key = clusters.add_cluster_to_hit_set(hitset_key, TrkrCluster())
        tracks = SvtxTrackMap()
        track = SvtxTrack(charge=1, momentum=[1.0, 0.0, 0.0])
        track.insert_state(TrackState(path_length=1.0, cluster_key=key))
        tracks.insert(track)
        top_node.child("DST").add_data("SVTX_TRACK_MAP", tracks)
        top_node.child("DST").add_data("TRKR_CLUSTER", clusters)
        module = StateClusterResidualsQA()

        module.init_run(top_node)
        with np.errstate(invalid="ignore"):
            assert module.process_event(top_node) == ReturnCode.EVENT_OK

        hist = HistoManager.instance().get("h_StateClusterResidualsQA_x")
        assert hist.entries == 1
        assert hist.overflow == 1
