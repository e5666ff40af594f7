"""Tests of the tracking geometry classes and their manager."""

import numpy as np
import pytest

from recoflow.geo import CylinderGeomMvtx, GeoManager, TpcGeomContainer, geo_factory
from recoflow.geo.mvtx import segmentation as seg


class TestGeoFactory:
    """Test the geometry configuration lookup."""

    def test_default(self):
        geo = geo_factory("sphenix")

        assert geo.name == "sphenix"
        assert geo.version == "1.0"
        assert [layer.layer for layer in geo.mvtx] == [0, 1, 2]
        assert geo.tpc.num_layers == 48

    def test_tag_and_version(self):
        assert geo_factory("SPHENIX", tag="sphenix-run24").tag == "sphenix-run24"
        assert geo_factory("sphenix", version=1).version == "1.0"

        with pytest.raises(ValueError):
            geo_factory("sphenix", tag="unknown")
        with pytest.raises(ValueError):
            geo_factory("sphenix", version="2")
        with pytest.raises(ValueError):
            geo_factory("unknown")

    def test_mvtx_layer(self):
        geo = geo_factory("sphenix")

        assert geo.get_mvtx_layer(1).n_staves == 16
        with pytest.raises(KeyError):
            geo.get_mvtx_layer(3)


class TestGeoManager:
    """Test the geometry singleton."""

    def test_initialize(self):
        geo = GeoManager.initialize("sphenix")

        assert GeoManager.is_initialized()
        assert GeoManager.get_instance() is geo
        assert GeoManager.initialize_or_get("sphenix") is geo
        with pytest.raises(ValueError):
            GeoManager.initialize("sphenix")

    def test_not_initialized(self):
        assert GeoManager.get_instance_if_initialized() is None
        with pytest.raises(ValueError):
            GeoManager.get_instance()


class TestTpcGeomContainer:
    """Test the TPC readout layer radii."""

    def test_default_radii(self):
        geom = TpcGeomContainer()
        radii = geom.layer_radii

        assert len(radii) == 48
        assert radii[0] == pytest.approx(30.0 + 10.0 / 32)
        assert radii[-1] == pytest.approx(76.4 - 16.4 / 32)
        assert np.all(np.diff(radii) > 0)

    def test_layer_lookup(self):
        geom = TpcGeomContainer()

        assert geom.get_layer_radius(7) == geom.layer_radii[0]
        assert [layer for layer, _ in geom][:2] == [7, 8]
        with pytest.raises(IndexError):
            geom.get_layer_radius(55)

    def test_invalid_boundaries(self):
        with pytest.raises(AssertionError):
            TpcGeomContainer(boundaries=[40.0, 30.0])


class TestMvtxSegmentation:
    """Test the ALPIDE pixel segmentation."""

    def test_pixel_center_round_trip(self):
        """The center of a pixel falls back into the same pixel."""
        for row, col in [(0, 0), (10, 20), (511, 1023)]:
            valid, local = seg.detector_to_local(row, col)
            assert valid
            assert seg.local_to_detector(local[0], local[2]) == (True, row, col)

    def test_out_of_matrix(self):
        valid, row, col = seg.local_to_detector(0.0, 10.0)

        assert not valid
        assert (row, col) == (-1, -1)
        assert not seg.detector_to_local(512, 0)[0]


class TestCylinderGeomMvtx:
    """Test the MVTX layer geometry."""

    def test_pixel_round_trip(self):
        geom = CylinderGeomMvtx(layer=0, n_staves=12, radius=2.461)
        local = geom.get_local_coords_from_pixel(100, 200)

        valid, row, col = geom.get_pixel_from_local_coords(local)

        assert valid
        assert (row, col) == (100, 200)

    def test_pixel_number(self):
        geom = CylinderGeomMvtx()
        number = geom.get_pixel_number_from_xbin_zbin(5, 3)

        assert number == 5 + 3 * 512
        assert geom.get_pixel_x_from_pixel_number(number) == 5
        assert geom.get_pixel_z_from_pixel_number(number) == 3

    def test_sensor_indices(self):
        """The stave index wraps around the layer."""
        geom = CylinderGeomMvtx(layer=0, n_staves=12, phi_step=2.0 * np.pi / 12)

        stave, chip = geom.get_sensor_indices_from_world_coords(
            np.array([2.4, -0.01, 0.0])
        )

        assert stave == 0
        assert chip == 4
