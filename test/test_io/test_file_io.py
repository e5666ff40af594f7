"""Tests of the input file lists, the HDF5 reader/writer and the CSV logger."""

import os

import numpy as np
import pytest

from recoflow.data import (
    EventHeader,
    FlagSave,
    RunHeader,
    TrkrHit,
    TrkrHitSetContainer,
)
from recoflow.defs import mvtx
from recoflow.io import InputFileHandler, reader_factory, writer_factory
from recoflow.io.read import HDF5Reader
from recoflow.io.write import CSVWriter, HDF5Writer
from recoflow.node import make_top_node


class TestInputFileHandler:
    """Test the bookkeeping of the input file list."""

    def test_list_file(self, tmp_path):
        """Comments and empty lines are skipped."""
        list_file = tmp_path / "files.list"
        list_file.write_text("# first run\na.h5\n\nb.h5\n")
        handler = InputFileHandler()

        assert handler.add_list_file(str(list_file)) == 2
        assert handler.file_list == ["a.h5", "b.h5"]
        assert handler.print_files() == "file list:\na.h5\nb.h5"

    def test_bad_list_file(self, tmp_path):
        handler = InputFileHandler()

        with pytest.raises(FileNotFoundError):
            handler.add_list_file(str(tmp_path / "missing.list"))
        with pytest.raises(ValueError):
            handler.add_list_file(str(tmp_path))

    def test_repeat(self):
        """Processed files are put back at the end of the list."""
        handler = InputFileHandler()
        handler.add_file("a.h5")
        handler.add_file("b.h5")
        handler.repeat = 1

        handler.update_file_list()
        assert handler.file_list == ["b.h5", "a.h5"]
        assert handler.repeat == 0

        handler.update_file_list()
        handler.update_file_list()
        assert handler.file_list_empty

        handler.reset_file_list()
        assert handler.file_list == ["a.h5", "b.h5"]

    def test_repeat_forever(self):
        handler = InputFileHandler()
        handler.add_file("a.h5")
        handler.repeat = -1

        for _ in range(3):
            handler.update_file_list()

        assert handler.file_list == ["a.h5"]
        assert handler.repeat == -1

    def test_reset_empty(self):
        with pytest.raises(ValueError):
            InputFileHandler().reset_file_list()

    def test_open_next_file(self):
        handler = InputFileHandler()
        assert not handler.open_next_file()

        handler.add_file("a.h5")
        assert handler.open_next_file()
        assert handler.file_list_opened == ["a.h5"]

    def test_opening_script(self, tmp_path):
        """Missing or non-executable scripts are not run."""
        handler = InputFileHandler()
        assert handler.run_before_opening(["a.h5"]) == 0

        handler.opening_script = str(tmp_path / "missing.sh")
        assert handler.run_before_opening(["a.h5"]) == -1

        script = tmp_path / "stage.sh"
        script.write_text("#!/bin/sh\nexit 0\n")
        os.chmod(script, 0o644)
        handler.opening_script = str(script)
        assert handler.run_before_opening(["a.h5"]) == -1


@pytest.fixture(name="event_tree")
def fixture_event_tree():
    """Tree with run-level and event-level nodes."""
    top_node = make_top_node()
    top_node.child("RUN").add_data("RunHeader", RunHeader(run_number=66522))
    top_node.child("RUN").add_data("Flags", FlagSave(flags={"RUNNUMBER": 66522}))
    top_node.child("DST").add_data("EventHeader", EventHeader(evt_sequence=1))
    top_node.child("DST").add_data("TRKR_HITSET", TrkrHitSetContainer())
    top_node.child("DST").add_data("Transient", EventHeader(), persistent=False)

    return top_node


def write_events(file_name, top_node, num_events=3, **kwargs):
    """Write a few events, changing the content of the tree in between."""
    cfg = {"base": {"iterations": num_events}}
    writer = HDF5Writer(file_name=file_name, **kwargs)
    hitsets = top_node.child("DST").child("TRKR_HITSET").data
    header = top_node.child("DST").child("EventHeader").data
    for i in range(num_events):
        hitsets.reset()
        hitset = hitsets.find_or_add_hit_set(mvtx.gen_hitset_key(0, i, 0, 0))
        hitset.add_hit(mvtx.gen_hit_key(i, 2 * i), TrkrHit(adc=10 + i))
        header.evt_sequence = 100 + i
        writer(top_node, 66522, 100 + i, cfg)
    writer.write_run(top_node, cfg)

    return writer


class TestHDF5IO:
    """Test writing events to HDF5 and reading them back."""

    def test_round_trip(self, tmp_path, event_tree):
        file_name = str(tmp_path / "events.h5")
        writer = write_events(file_name, event_tree)
        assert writer.num_events == 3

        reader = HDF5Reader(file_keys=file_name)
        assert len(reader) == 3
        assert reader.version == "0.3.0"
        assert reader.cfg == {"base": {"iterations": 3}}

        data = reader[1]
        assert data["index"] == 1
        assert (data["run_number"], data["event_number"]) == (66522, 101)
        assert data["run"]["RunHeader"].run_number == 66522
        assert data["run"]["Flags"].flags == {"RUNNUMBER": 66522}
        assert sorted(data["dst"]) == ["EventHeader", "TRKR_HITSET"]
        assert data["dst"]["EventHeader"] == EventHeader(evt_sequence=101)

        hitsets = data["dst"]["TRKR_HITSET"]
        hitset = hitsets.find_hit_set(mvtx.gen_hitset_key(0, 1, 0, 0))
        assert hitsets.size() == 1
        assert hitset.get_hit(mvtx.gen_hit_key(1, 2)).adc == 11

    def test_node_selection(self, tmp_path, event_tree):
        file_name = str(tmp_path / "events.h5")
        write_events(file_name, event_tree, skip_nodes=["TRKR_HITSET"])

        assert list(HDF5Reader(file_keys=file_name)[0]["dst"]) == ["EventHeader"]

        reader = HDF5Reader(file_keys=file_name, nodes=[])
        assert reader[0]["dst"] == {}

    def test_entry_selection(self, tmp_path, event_tree):
        file_name = str(tmp_path / "events.h5")
        write_events(file_name, event_tree, num_events=5)

        reader = HDF5Reader(file_keys=file_name, n_entry=2, n_skip=1)
        assert [reader[i]["event_number"] for i in range(len(reader))] == [101, 102]

        reader = HDF5Reader(file_keys=file_name, skip_entry_list=[0, 4])
        np.testing.assert_array_equal(reader.entry_index, [1, 2, 3])

    def test_multiple_files(self, tmp_path, event_tree):
        """Entries are indexed across files, lists and repeats included."""
        for name in ("a.h5", "b.h5"):
            write_events(str(tmp_path / name), event_tree, num_events=2)
        list_file = tmp_path / "files.list"
        list_file.write_text(f"{tmp_path / 'b.h5'}\n{tmp_path / 'missing.h5'}\n")

        reader = HDF5Reader(file_keys=str(tmp_path / "a.h5"), list_files=str(list_file))
        assert reader.file_paths == [str(tmp_path / "a.h5"), str(tmp_path / "b.h5")]
        assert len(reader) == 4
        assert reader.get_file_entry_index(3) == 1

        reader = HDF5Reader(file_keys=str(tmp_path / "a.h5"), repeat=1)
        assert len(reader) == 4

    def test_existing_file(self, tmp_path, event_tree):
        file_name = str(tmp_path / "events.h5")
        write_events(file_name, event_tree, num_events=1)

        with pytest.raises(FileExistsError):
            HDF5Writer(file_name=file_name)
        assert HDF5Writer(file_name=file_name, overwrite=True).num_events == 0

    def test_factories(self, tmp_path, event_tree):
        prefix = str(tmp_path / "input")
        writer = writer_factory({"name": "hdf5"}, prefix=prefix)
        assert writer.file_name == f"{prefix}_recoflow.h5"

        writer(event_tree, 1, 1)
        reader = reader_factory({"name": "hdf5", "file_keys": writer.file_name})
        assert isinstance(reader, HDF5Reader)
        assert reader.cfg is None


class TestCSVWriter:
    """Test the CSV logger."""

    def test_write(self, tmp_path):
        file_name = str(tmp_path / "log.csv")
        writer = CSVWriter(file_name)
        writer.append({"iter": 0, "time": 0.5})
        writer.append({"time": 0.25, "iter": 1})

        with open(file_name, encoding="utf-8") as in_file:
            assert in_file.read() == "iter,time\n0,0.5\n1,0.25\n"

        with pytest.raises(FileExistsError):
            CSVWriter(file_name)

    def test_keys(self, tmp_path):
        file_name = str(tmp_path / "log.csv")
        writer = CSVWriter(file_name)
        writer.append({"iter": 0, "time": 0.5})

        with pytest.raises(KeyError):
            writer.append({"iter": 1, "time": 0.5, "memory": 2.0})
        with pytest.raises(KeyError):
            writer.append({"iter": 1})

        lenient = CSVWriter(file_name, append=True, accept_missing=True)
        lenient.append({"iter": 1})
        with open(file_name, encoding="utf-8") as in_file:
            assert in_file.read().splitlines()[-1] == "1,-1"

    def test_append_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            CSVWriter(str(tmp_path / "log.csv"), append=True)
