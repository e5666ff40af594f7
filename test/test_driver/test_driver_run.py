"""Tests of the event loop driver."""

import os

import pytest

from recoflow.data import RunHeader, SyncObject
from recoflow.driver import Driver
from recoflow.geo import TpcGeomContainer
from recoflow.hist import Hist1D, HistoManager
from recoflow.io.read import HDF5Reader
from recoflow.io.write import HDF5Writer
from recoflow.main import run
from recoflow.node import RecoConsts, RecoServer, get_class, make_top_node
from recoflow.reco import SubsysReco
from recoflow.utils.enums import ReturnCode


def base_cfg(tmp_path, **kwargs):
    """Driver configuration without input, with the header modules."""
    cfg = {
        "base": {"iterations": 3, "run_number": 12, "log_dir": str(tmp_path)},
        "reco": {"head": {"module": "head_reco"}, "sync": {"module": "sync"}},
    }
    cfg.update(kwargs)

    return cfg


class TestDriver:
    """Test the processing of events without and with input files."""

    def test_generate(self, tmp_path):
        """Events are processed without a reader."""
        driver = run(base_cfg(tmp_path))

        assert driver.server.event_counter == 3
        assert driver.server.event_number == 2
        top_node = driver.server.top_node
        assert get_class(top_node, "RunHeader", RunHeader).run_number == 12
        assert RecoConsts.get_int_flag("RUNNUMBER") == 12

        log_path = tmp_path / "recoflow_log.csv"
        lines = log_path.read_text().splitlines()
        assert len(lines) == 4
        assert lines[0].startswith("iter,run,event,code,write,cpu_mem")
        assert lines[1].startswith("0,12,0,0,1,")

    def test_flags(self, tmp_path):
        """Configured flags are set, the run number follows the events."""
        cfg = base_cfg(tmp_path)
        cfg["base"]["flags"] = {"RUNNUMBER": 40, "CDB_GLOBALTAG": "ProdA_2024"}

        driver = run(cfg)

        assert get_class(driver.server.top_node, "Sync", SyncObject) is not None
        assert RecoConsts.get_int_flag("RUNNUMBER") == 12
        assert RecoConsts.get_string_flag("CDB_GLOBALTAG") == "ProdA_2024"

    def test_fresh_state(self, tmp_path):
        """A new job does not inherit the flags or histograms of the last."""
        cfg = base_cfg(tmp_path / "first")
        cfg["base"]["flags"] = {"CDB_GLOBALTAG": "ProdA_2024"}
        run(cfg)
        HistoManager.instance().register(Hist1D("h_previous"))

        Driver(base_cfg(tmp_path / "second"))

        assert not RecoConsts.flag_exists("CDB_GLOBALTAG")
        assert RecoConsts.get_int_flag("RUNNUMBER") == 12
        assert "h_previous" not in HistoManager.instance()

    def test_missing_iterations(self, tmp_path):
        cfg = base_cfg(tmp_path)
        del cfg["base"]["iterations"]

        with pytest.raises(AssertionError):
            Driver(cfg).run()

    def test_existing_log(self, tmp_path):
        run(base_cfg(tmp_path))

        with pytest.raises(FileExistsError):
            run(base_cfg(tmp_path))

        cfg = base_cfg(tmp_path)
        cfg["base"]["overwrite_log"] = True
        assert run(cfg).server.event_counter == 3

    def test_write_read(self, tmp_path):
        """Events written by one job are read back by another."""
        file_name = str(tmp_path / "events.h5")
        io_cfg = {"writer": {"name": "hdf5", "file_name": file_name}}
        run(base_cfg(tmp_path / "write", io=io_cfg))

        reader = HDF5Reader(file_keys=file_name)
        assert len(reader) == 3
        assert reader.cfg["base"]["run_number"] == 12
        data = reader[2]
        assert data["event_number"] == 2
        assert sorted(data["dst"]) == ["EventHeader", "Sync"]
        assert data["dst"]["EventHeader"].evt_sequence == 2
        assert data["run"]["RunHeader"].run_number == 12

        cfg = {
            "base": {"log_dir": str(tmp_path / "read"), "prefix_log": True},
            "io": {"reader": {"name": "hdf5", "file_keys": file_name}},
            "reco": {"sync": None},
        }
        driver = run(cfg)

        assert driver.iterations == 3
        assert driver.log_prefix == "events"
        assert os.path.isfile(tmp_path / "read" / "events_recoflow_log.csv")
        assert driver.current_run is None
        top_node = driver.server.top_node
        assert get_class(top_node, "RunHeader", RunHeader).run_number == 12

    def test_geometry(self, tmp_path):
        """The geometry is placed in the run node."""
        driver = Driver(base_cfg(tmp_path, geo={"detector": "sphenix"}))

        run_node = driver.server.top_node.child("RUN")
        assert sorted(run_node.child("CYLINDERGEOM_MVTX").data) == [0, 1, 2]
        assert isinstance(run_node.child("TPCGEOMCONTAINER").data, TpcGeomContainer)
        assert not run_node.child("TPCGEOMCONTAINER").persistent

    def test_skip_run(self, tmp_path):
        """A run which fails to initialize is skipped, histograms are saved."""
        hist_file = str(tmp_path / "hists.h5")
        cfg = base_cfg(tmp_path)
        cfg["base"]["hist_file"] = hist_file
        cfg["reco"]["residuals"] = {"module": "state_cluster_residuals_qa"}

        driver = Driver(cfg)
        driver.initialize_log()
        driver.initialize()
        codes = [driver.process(i)[0] for i in range(2)]
        driver.finalize()

        assert codes == [ReturnCode.ABORTRUN] * 2
        assert driver.skip_run
        assert len(HistoManager.load(hist_file).names()) == 3


class TestPrefix:
    """Test the output prefix built from the input file names."""

    def test_single_file(self):
        assert Driver.get_prefix(["/data/run_0001.h5"]) == "run_0001"
        assert Driver.get_prefix(["/a/run.h5", "/b/run.h5"]) == "run"

    def test_multiple_files(self):
        paths = ["/data/run_0001.h5", "/data/run_0002.h5"]

        assert Driver.get_prefix(paths) == "run_000--2"
        assert Driver.get_prefix(["a.h5", "b.h5"]) == "recoflow--2"


class ScriptedCode(SubsysReco):
    """Module which returns a predefined code for some event numbers."""

    def __init__(self, codes, **kwargs):
        super().__init__(**kwargs)
        self.codes = codes
        self.runs = []
        self.events = []
        self.ended = False

    def init_run(self, top_node):
        self.runs.append(RecoServer.instance().run_number)
        return ReturnCode.EVENT_OK

    def process_event(self, top_node):
        event_number = RecoServer.instance().event_number
        self.events.append(event_number)
        return self.codes.get(event_number, ReturnCode.EVENT_OK)

    def end(self, top_node):
        self.ended = True
        return ReturnCode.EVENT_OK


class TestRunControl:
    """Test the reaction of the event loop to run and job abort requests."""

    @pytest.fixture(name="two_runs")
    def fixture_two_runs(self, tmp_path):
        """File with three events in run 1 followed by two events in run 2."""
        file_name = str(tmp_path / "runs.h5")
        writer = HDF5Writer(file_name=file_name)
        top_node = make_top_node("WRITE")
        for run_number, event_number in ((1, 0), (1, 1), (1, 2), (2, 3), (2, 4)):
            writer(top_node, run_number, event_number)

        return file_name

    @staticmethod
    def make_driver(tmp_path, file_name, codes):
        """Driver reading the input file, with a scripted module appended."""
        cfg = {
            "base": {"log_dir": str(tmp_path / "logs")},
            "io": {"reader": {"name": "hdf5", "file_keys": file_name}},
        }
        driver = Driver(cfg)
        module = ScriptedCode(codes, name="scripted")
        driver.reco.modules["scripted"] = module
        driver.reco.watch.initialize("scripted")
        driver.watch.update(driver.reco.watch, "reco")

        return driver, module

    @staticmethod
    def read_codes(tmp_path):
        """Return codes recorded in the event log."""
        lines = (tmp_path / "logs" / "recoflow_log.csv").read_text().splitlines()
        return [int(line.split(",")[3]) for line in lines[1:]]

    def test_abort_run(self, tmp_path, two_runs):
        """The rest of the run is skipped, the next run is processed."""
        codes = {1: ReturnCode.ABORTRUN}
        driver, module = self.make_driver(tmp_path, two_runs, codes)

        driver.run()

        assert module.runs == [1, 2]
        assert module.events == [0, 1, 3, 4]
        assert not driver.skip_run
        assert self.read_codes(tmp_path) == [0, 2, 2, 0, 0]

    def test_abort_processing(self, tmp_path, two_runs):
        """The event loop stops, the modules are still finalized."""
        codes = {1: ReturnCode.ABORTPROCESSING}
        driver, module = self.make_driver(tmp_path, two_runs, codes)

        driver.run()

        assert module.runs == [1]
        assert module.events == [0, 1]
        assert module.ended
        assert self.read_codes(tmp_path) == [0, 3]
