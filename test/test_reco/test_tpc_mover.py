"""Tests of the TPC cluster mover."""

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
from recoflow.geo import TpcGeomContainer
from recoflow.reco.tpc import TpcClusterMover, TpcClusterMoverReco
from recoflow.utils.enums import ReturnCode, TrkrId

# Track circle in the transverse plane: passes through the origin
RADIUS, X0, Y0 = 150.0, 0.0, 150.0

# Track line in the (r, z) plane
SLOPE, INTERCEPT = 0.5, 1.0


def circle_point(r):
    """Point of the track circle at a given distance from the beam axis."""
    y = r * r / (2.0 * Y0)
    return np.array([np.sqrt(r * r - y * y), y, SLOPE * r + INTERCEPT])


def tpc_cluster_key(layer):
    return trkr.gen_cluster_key(tpc.gen_hitset_key(layer, 0, 0), 0)


@pytest.fixture(name="track_clusters")
def fixture_track_clusters():
    """Clusters on the track, slightly outside of their readout layer."""
    radii = TpcGeomContainer().layer_radii
    clusters = []
    for layer in (10, 20, 30, 40):
        position = circle_point(radii[layer - 7] + 0.3)
        clusters.append((tpc_cluster_key(layer), position))

    return clusters


class TestTpcClusterMover:
    """Test the projection of the clusters onto their readout layers."""

    def test_move(self, track_clusters):
        """Clusters are slid along the track onto their layer radius."""
        mover = TpcClusterMover()
        mvtx_key = trkr.gen_cluster_key(mvtx.gen_hitset_key(0, 0, 0), 0)
        mvtx_position = np.array([2.0, 0.1, 0.3])

        moved = mover.process_track([(mvtx_key, mvtx_position), *track_clusters])

        assert len(moved) == 5
        assert moved[0][0] == mvtx_key
        np.testing.assert_array_equal(moved[0][1], mvtx_position)
        for (key, position), (key_in, _) in zip(moved[1:], track_clusters):
            layer = trkr.get_cluster_layer(key)
            expected = circle_point(mover.layer_radius[layer - 7])
            assert key == key_in
            np.testing.assert_allclose(position, expected, atol=1e-4)

    def test_layer_out_of_range(self, track_clusters):
        """TPC clusters on a layer without readout radius are dropped."""
        key = trkr.gen_cluster_key(trkr.gen_hitset_key(TrkrId.TPC, 3), 0)
        global_in = [(key, circle_point(20.0)), *track_clusters]

        moved = TpcClusterMover().process_track(global_in)

        assert [k for k, _ in moved] == [k for k, _ in track_clusters]

    def test_too_few_clusters(self, track_clusters):
        """Tracks with fewer than three TPC clusters are left unchanged."""
        global_in = track_clusters[:2]

        assert TpcClusterMover().process_track(global_in) is global_in

    def test_geometry(self):
        """The layer radii can be read from a geometry container."""
        mover = TpcClusterMover()
        geom = TpcGeomContainer(boundaries=[20.0, 80.0], layers_per_region=48)
        mover.initialize_geometry(geom)

        np.testing.assert_allclose(mover.layer_radius, geom.layer_radii)

    def test_no_intersection(self):
        """Circles which do not reach the cylinder give no projection."""
        mover = TpcClusterMover()

        proj = mover.get_circle_circle_intersection(50.0, 1.0, 5.0, 5.0, 5.0, 5.0)

        assert proj is None


class TestTpcClusterMoverReco:
    """Test the module which moves the clusters of every track."""

    def test_missing_inputs(self, top_node):
        module = TpcClusterMoverReco()

        assert module.process_event(top_node) == ReturnCode.ABORTEVENT

    def test_process_event(self, top_node, track_clusters):
        """The moved clusters of each track are stored in the tree."""
        clusters = TrkrClusterContainer()
        track = SvtxTrack(id=3, charge=1, momentum=[1.0, 0.0, 0.0])
        track.insert_state(TrackState(path_length=0.0))
        for i, (key, position) in enumerate(track_clusters):
            clusters.add_cluster(key, TrkrCluster(position=position))
            track.insert_state(
                TrackState(path_length=i + 1.0, position=position, cluster_key=key)
            )
        tracks = SvtxTrackMap()
        tracks.insert(track)

        dst = top_node.child("DST")
        dst.add_data("SVTX_TRACK_MAP", tracks)
        dst.add_data("TRKR_CLUSTER", clusters)
        top_node.child("RUN").add_data("TPCGEOMCONTAINER", TpcGeomContainer())

        module = TpcClusterMoverReco()
        assert module.init_run(top_node) == ReturnCode.EVENT_OK
        assert module.process_event(top_node) == ReturnCode.EVENT_OK
        assert module.process_event(top_node) == ReturnCode.EVENT_OK

        moved = dst.child("TPC_MOVED_CLUSTERS").data
        assert list(moved) == [3]
        assert [k for k, _ in moved[3]] == [k for k, _ in track_clusters]
        assert not dst.child("TPC_MOVED_CLUSTERS").persistent
