"""Tests of the header, synchronization and flag modules."""

import pytest

from recoflow.data import (
    EventHeader,
    FlagSave,
    GenEvent,
    HeavyIon,
    PHHepMCGenEvent,
    PHHepMCGenEventMap,
    PrdfEvent,
    RunHeader,
    SyncObject,
)
from recoflow.node import MissingNodeError, RecoConsts, RecoServer, get_class
from recoflow.reco.ffa import FlagHandler, HeadReco, SyncReco
from recoflow.utils.enums import ReturnCode


class TestHeadReco:
    """Test the creation and filling of the headers."""

    def test_init(self, top_node):
        HeadReco().init(top_node)

        assert isinstance(top_node.child("RUN").child("RunHeader").data, RunHeader)
        assert isinstance(top_node.child("DST").child("EventHeader").data, EventHeader)

    def test_init_run(self, top_node):
        module = HeadReco()
        module.init(top_node)
        RecoConsts.set_flag("RUNNUMBER", 54321)

        assert module.init_run(top_node) == ReturnCode.EVENT_OK
        assert get_class(top_node, "RunHeader", RunHeader).run_number == 54321

    def test_missing_headers(self, top_node):
        with pytest.raises(MissingNodeError):
            HeadReco().init_run(top_node)
        with pytest.raises(MissingNodeError):
            HeadReco().process_event(top_node)

    def test_heavy_ion(self, top_node):
        """Collision information comes from the foreground generator event."""
        module = HeadReco()
        module.init(top_node)
        server = RecoServer.instance()
        server.run_number, server.event_number = 7, 42

        heavy_ion = HeavyIon(
            impact_parameter=3.5,
            event_plane_angle=0.2,
            eccentricity=0.1,
            ncoll=800,
            npart_proj=150,
            npart_targ=160,
        )
        gen_map = PHHepMCGenEventMap()
        gen_map.insert(
            PHHepMCGenEvent(
                embedding_id=0,
                event=GenEvent(heavy_ion=heavy_ion),
                flow_psi={2: 0.5},
            )
        )
        gen_map.insert(
            PHHepMCGenEvent(
                embedding_id=1, event=GenEvent(heavy_ion=HeavyIon(ncoll=1))
            )
        )
        top_node.child("DST").add_data("PHHepMCGenEventMap", gen_map)

        assert module.process_event(top_node) == ReturnCode.EVENT_OK

        header = get_class(top_node, "EventHeader", EventHeader)
        assert header.run_number == 7
        assert header.evt_sequence == 42
        assert header.impact_parameter == 3.5
        assert header.event_plane_angle == 0.2
        assert header.ncoll == 800
        assert header.npart == 310
        assert header.get_flow_psi(2) == 0.5
        assert header.get_flow_psi(1) == 0.0

    def test_raw_event(self, top_node):
        """Without generator events, the event type comes from the raw event."""
        module = HeadReco()
        module.init(top_node)
        top_node.child("DST").add_data("PRDF", PrdfEvent(evt_type=12))

        module.process_event(top_node)

        header = get_class(top_node, "EventHeader", EventHeader)
        assert header.evt_type == 12
        assert header.ncoll == -1


class TestSyncReco:
    """Test the synchronization object."""

    def test_fill(self, top_node):
        module = SyncReco()
        module.init(top_node)
        server = RecoServer.instance()
        server.run_number, server.event_number, server.event_counter = 3, 10, 5
        RecoConsts.set_flag("RUNSEGMENT", 2)

        module.process_event(top_node)

        sync = get_class(top_node, "Sync", SyncObject)
        assert (sync.run_number, sync.event_number, sync.event_counter) == (3, 10, 5)
        assert sync.segment_number == 2

    def test_forced_segment(self, top_node):
        module = SyncReco(forced_segment=9)
        module.init(top_node)
        RecoConsts.set_flag("RUNSEGMENT", 2)

        module.process_event(top_node)

        assert get_class(top_node, "Sync", SyncObject).segment_number == 9

    def test_existing_node(self, top_node):
        """An existing synchronization node is reused."""
        sync = SyncObject(segment_number=4)
        top_node.child("DST").add_data("Sync", sync)

        SyncReco().init(top_node)
        SyncReco().process_event(top_node)

        assert get_class(top_node, "Sync", SyncObject) is sync
        assert sync.segment_number == 4


class TestFlagHandler:
    """Test the synchronization of the flags with the run tree."""

    def test_create(self, top_node):
        RecoConsts.set_flag("RUNNUMBER", 11)
        module = FlagHandler()

        module.init_run(top_node)
        RecoConsts.set_flag("TIMESTAMP", "2024")
        module.end(top_node)

        flags = get_class(top_node, "Flags", FlagSave)
        assert flags.flags == {"RUNNUMBER": 11, "TIMESTAMP": "2024"}

    def test_read_back(self, top_node):
        """Flags read from an input are copied into the job flags."""
        top_node.child("RUN").add_data("Flags", FlagSave(flags={"CDB_GLOBALTAG": "x"}))

        FlagHandler().init_run(top_node)

        assert RecoConsts.get_string_flag("CDB_GLOBALTAG") == "x"
