"""Tests of the packed tracker keys."""

import pytest

from recoflow.defs import micromegas, mvtx, tpc, trkr
from recoflow.utils.enums import SegmentationType, TrkrId


class TestTrkrKeys:
    """Test the keys shared by all the tracking subsystems."""

    def test_hitset_key_layout(self):
        """The tracker id and layer occupy the upper 16 bits."""
        key = trkr.gen_hitset_key(TrkrId.TPC, 12)
        assert key == (2 << 24) | (12 << 16)
        assert trkr.get_trkr_id(key) == TrkrId.TPC
        assert trkr.get_layer(key) == 12

    def test_cluster_key(self):
        """A cluster key holds its hitset key in its upper 32 bits."""
        hitset_key = trkr.gen_hitset_key(TrkrId.MVTX, 1)
        key = trkr.gen_cluster_key(hitset_key, 7)
        assert key == (hitset_key << 32) | 7
        assert trkr.get_hitset_key(key) == hitset_key
        assert trkr.get_cluster_index(key) == 7
        assert trkr.get_cluster_trkr_id(key) == TrkrId.MVTX
        assert trkr.get_cluster_layer(key) == 1

    def test_out_of_range(self):
        """Values which do not fit in their bit field are rejected."""
        with pytest.raises(ValueError):
            trkr.gen_hitset_key(TrkrId.MVTX, 256)
        with pytest.raises(ValueError):
            trkr.gen_cluster_key(0, 1 << 32)

    def test_unknown_tracker(self):
        """Tracker ids without a subsystem decode to plain integers."""
        key = trkr.gen_hitset_key(4, 60)

        assert trkr.get_trkr_id(key) == 4
        assert not isinstance(trkr.get_trkr_id(key), TrkrId)
        assert trkr.get_trkr_id(key) != TrkrId.MVTX
        assert trkr.get_cluster_trkr_id(trkr.gen_cluster_key(key, 0)) == 4


class TestMvtxKeys:
    """Test the MVTX stave/chip/strobe keys."""

    def test_fields(self):
        """Each field of the key can be recovered."""
        key = mvtx.gen_hitset_key(2, 17, 8, -3)
        assert trkr.get_trkr_id(key) == TrkrId.MVTX
        assert trkr.get_layer(key) == 2
        assert mvtx.get_stave_id(key) == 17
        assert mvtx.get_chip_id(key) == 8
        assert mvtx.get_strobe_id(key) == -3

    def test_strobe_range(self):
        """The strobe is stored with an offset of 16."""
        assert mvtx.get_strobe_id(mvtx.gen_hitset_key(0, 0, 0, -16)) == -16
        assert mvtx.get_strobe_id(mvtx.gen_hitset_key(0, 0, 0, 15)) == 15
        with pytest.raises(ValueError):
            mvtx.gen_hitset_key(0, 0, 0, 16)
        with pytest.raises(ValueError):
            mvtx.gen_hitset_key(0, 0, 0, -17)

    def test_reset_strobe(self):
        """Resetting the strobe only changes the strobe field."""
        key = mvtx.gen_hitset_key(1, 4, 3, 5)
        assert mvtx.reset_strobe(key) == mvtx.gen_hitset_key(1, 4, 3, 0)
        assert mvtx.reset_strobe(mvtx.reset_strobe(key)) == mvtx.reset_strobe(key)

    def test_hit_key(self):
        """The column sits in the upper 16 bits, the row in the lower ones."""
        key = mvtx.gen_hit_key(1023, 511)
        assert key == (1023 << 16) | 511
        assert mvtx.get_col(key) == 1023
        assert mvtx.get_row(key) == 511


class TestTpcKeys:
    """Test the TPC sector/side keys."""

    def test_fields(self):
        key = tpc.gen_hitset_key(20, 11, 1)
        assert trkr.get_trkr_id(key) == TrkrId.TPC
        assert trkr.get_layer(key) == 20
        assert tpc.get_sector_id(key) == 11
        assert tpc.get_side(key) == 1

    def test_layer_range(self):
        """Only the TPC readout layers are accepted."""
        with pytest.raises(ValueError):
            tpc.gen_hitset_key(6, 0, 0)
        with pytest.raises(ValueError):
            tpc.gen_hitset_key(55, 0, 0)

    def test_hit_key(self):
        key = tpc.gen_hit_key(300, 250)
        assert tpc.get_pad(key) == 300
        assert tpc.get_tbin(key) == 250


class TestMicromegasKeys:
    """Test the Micromegas segmentation/tile keys."""

    def test_fields(self):
        key = micromegas.gen_hitset_key(56, SegmentationType.SEGMENTATION_PHI, 5)
        assert trkr.get_trkr_id(key) == TrkrId.MICROMEGAS
        assert trkr.get_layer(key) == 56
        assert micromegas.get_segmentation_type(key) is (
            SegmentationType.SEGMENTATION_PHI
        )
        assert micromegas.get_tile_id(key) == 5

    def test_hit_key(self):
        key = micromegas.gen_hit_key(200, 1000)
        assert micromegas.get_strip(key) == 200
        assert micromegas.get_sample(key) == 1000
