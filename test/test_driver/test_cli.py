"""Tests of the command-line configuration handling."""

import pytest

from recoflow.bin.cli import build_config, cli


@pytest.fixture(name="config_file")
def fixture_config_file(tmp_path):
    """Configuration file without an input/output block."""
    path = tmp_path / "job.yaml"
    path.write_text(
        "base:\n"
        "  run_number: 12\n"
        "reco:\n"
        "  head:\n"
        "    module: head_reco\n"
    )

    return str(path)


@pytest.fixture(name="io_config_file")
def fixture_io_config_file(tmp_path):
    """Configuration file with a reader and a writer."""
    path = tmp_path / "io.yaml"
    path.write_text(
        "io:\n"
        "  reader:\n"
        "    name: hdf5\n"
        "  writer:\n"
        "    name: hdf5\n"
    )

    return str(path)


class TestBuildConfig:
    """Test the command-line overrides of the configuration."""

    def test_no_reader(self, config_file, tmp_path):
        """Without a reader, the number of events sets the iterations."""
        cfg = build_config(config_file, n=5, log_dir="logs", hist_file="qa.h5")

        assert cfg["base"]["iterations"] == 5
        assert cfg["base"]["parent_path"] == str(tmp_path)
        assert cfg["base"]["log_dir"] == "logs"
        assert cfg["base"]["hist_file"] == "qa.h5"
        assert cfg["reco"] == {"head": {"module": "head_reco"}}

    def test_missing_io(self, config_file):
        with pytest.raises(KeyError):
            build_config(config_file, source=["events.h5"])
        with pytest.raises(KeyError):
            build_config(config_file, output="out.h5")

    def test_io(self, io_config_file):
        cfg = build_config(
            io_config_file, source=["a.h5", "b.h5"], output="out.h5", n=10, nskip=2
        )

        reader = cfg["io"]["reader"]
        assert reader["file_keys"] == ["a.h5", "b.h5"]
        assert (reader["n_entry"], reader["n_skip"]) == (10, 2)
        assert cfg["io"]["writer"]["file_name"] == "out.h5"
        assert "iterations" not in cfg["base"]

    def test_overrides(self, config_file):
        """Values given on the command line are parsed as YAML."""
        cfg = build_config(
            config_file,
            config_overrides=[
                "base.verbosity=debug",
                "reco.head.verbosity = 2",
                "reco.skim.trigger_bits=[10, 12]",
            ],
        )

        assert cfg["base"]["verbosity"] == "debug"
        assert cfg["reco"]["head"]["verbosity"] == 2
        assert cfg["reco"]["skim"]["trigger_bits"] == [10, 12]

    def test_bad_override(self, config_file):
        with pytest.raises(ValueError):
            build_config(config_file, config_overrides=["base.verbosity"])


class TestCli:
    """Test the command-line entry point."""

    def test_version(self, capsys):
        with pytest.raises(SystemExit):
            cli(["--version"])

        assert "recoflow 0.3.0" in capsys.readouterr().out

    def test_help(self, capsys):
        cli([])

        assert "usage" in capsys.readouterr().out

    def test_run(self, config_file, tmp_path):
        """A full job runs from the command line."""
        log_dir = tmp_path / "logs"
        cli(["-c", config_file, "-n", "2", "--log-dir", str(log_dir)])

        lines = (log_dir / "recoflow_log.csv").read_text().splitlines()
        assert len(lines) == 3
