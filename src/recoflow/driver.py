"""recoflow driver class.

Takes care of everything in one centralized place:
- Job flags and geometry set up
- Event loading into the node tree
- Reconstruction modules execution, run transitions
- Writing output to file
- Logging of the time and memory usage of each event
"""

import os
from datetime import datetime

import psutil
import yaml

from .geo import GeoManager
from .hist import HistoManager
from .io import reader_factory, writer_factory
from .io.write.csv import CSVWriter
from .node import DataNode, RecoConsts, RecoServer, find_first
from .reco import RecoManager
from .utils.enums import ReturnCode
from .utils.logger import logger
from .utils.stopwatch import StopwatchManager
from .version import __version__

__all__ = ["Driver"]


class Driver:
    """Central recoflow driver.

    Processes global configuration and runs the appropriate modules:
      1. Load an event into the node tree
      2. Initialize the modules when a new run starts
      3. Run the reconstruction modules
      4. Write accepted events to file

    It takes a configuration dictionary of the form:

    .. code-block:: yaml

        base:
          <Base driver configuration>
        geo:
          <Geometry configuration>
        io:
          <Input/output configuration>
        reco:
          <Reconstruction modules>
    """

    def __init__(self, cfg):
        """Initializes the class attributes.

        Parameters
        ----------
        cfg : dict
            Global configuration dictionary
        """
        # Initialize the timers and the configuration dictionary
        self.watch = StopwatchManager()
        self.watch.initialize("iteration")

        # Process the full configuration dictionary and store it
        base, geo, io, reco = self.process_config(**cfg)

        # Start from a fresh job state
        RecoServer.reset()
        RecoConsts.reset()
        HistoManager.reset()
        GeoManager.reset()
        self.server = RecoServer.instance()

        # Initialize the base driver configuration parameters
        self.initialize_base(**base)

        # Initialize the geometry
        self.geo = None
        if geo is not None:
            self.initialize_geo(**geo)

        # Initialize the input/output
        self.initialize_io(**(io or {}))

        # Initialize the reconstruction modules
        self.watch.initialize("reco")
        self.reco = RecoManager(reco)
        self.watch.update(self.reco.watch, "reco")

        # Event loop state
        self.current_run = None
        self.skip_run = False
        self.initialized = False

    def process_config(self, io=None, base=None, geo=None, reco=None):
        """Reads the configuration and dumps it to the logger.

        Parameters
        ----------
        io : dict, optional
            I/O configuration dictionary
        base : dict, optional
            Base driver configuration dictionary
        geo : dict, optional
            Geometry configuration dictionary
        reco : dict, optional
            Reconstruction modules configuration dictionary

        Returns
        -------
        dict
            Processed configuration
        """
        # If there is no base configuration, make it empty (will use defaults)
        if base is None:
            base = {}

        # Set the verbosity of the logger
        verbosity = base.get("verbosity", "info")
        logger.setLevel(verbosity.upper())

        # Rebuild global configuration dictionary
        self.cfg = {"base": base}
        if geo is not None:
            self.cfg["geo"] = geo
        if io is not None:
            self.cfg["io"] = io
        if reco is not None:
            self.cfg["reco"] = reco

        # Log environment information
        logger.info("Release version: %s\n", __version__)
        logger.info(yaml.dump(self.cfg, default_flow_style=None, sort_keys=False))

        return base, geo, io, reco

    def initialize_base(
        self,
        run_number=0,
        iterations=None,
        flags=None,
        log_dir="logs",
        prefix_log=False,
        overwrite_log=False,
        log_step=1,
        hist_file=None,
        parent_path=None,
        verbosity="info",
    ):
        """Initialize the base driver parameters.

        Parameters
        ----------
        run_number : int, default 0
            Run number of the events which do not carry one (`RUNNUMBER` flag)
        iterations : int, optional
            Number of events to process (-1 means all entries)
        flags : dict, optional
            Job flags to set, by name
        log_dir : str, default 'logs'
            Path to the directory where the logs will be written to
        prefix_log : bool, default False
            If True, use the input file name to prefix the log name
        overwrite_log : bool, default False
            If True, overwrite log even if it already exists
        log_step : int, default 1
            Number of iterations before the logging is called (1: every step)
        hist_file : str, optional
            Path to the HDF5 file where to save the QA histograms
        parent_path : str, optional
            Path to the parent directory of the configuration file
        verbosity : int, default 'info'
            Verbosity level to pass to the `logging` module. Pick one of
            'debug', 'info', 'warning', 'error', 'critical'.
        """
        # Set the job flags
        for name, value in (flags or {}).items():
            RecoConsts.set_flag(name, value)
        if not RecoConsts.flag_exists("RUNNUMBER"):
            RecoConsts.set_flag("RUNNUMBER", run_number)

        # Store general parameters
        self.run_number = run_number
        self.iterations = iterations
        self.log_dir = log_dir
        self.prefix_log = prefix_log
        self.overwrite_log = overwrite_log
        self.log_step = log_step
        self.hist_file = hist_file
        self.parent_path = parent_path

    def initialize_geo(self, detector, tag=None, version=None):
        """Load the geometry and place it in the run node.

        Parameters
        ----------
        detector : str
            Name of the detector
        tag : str, optional
            Tag of the geometry configuration
        version : str, optional
            Version of the geometry configuration
        """
        self.geo = GeoManager.initialize_or_get(detector, tag, version)

        run_node = self.server.top_node.child("RUN")
        if self.geo.mvtx:
            mvtx = {geom.layer: geom for geom in self.geo.mvtx}
            run_node.add_data("CYLINDERGEOM_MVTX", mvtx, persistent=False)
        if self.geo.tpc is not None:
            run_node.add_data("TPCGEOMCONTAINER", self.geo.tpc, persistent=False)

    def initialize_io(self, reader=None, writer=None, top_node=None):
        """Initializes the input/output scripts.

        Parameters
        ----------
        reader : dict, optional
            Reader configuration dictionary. If not specified, the modules
            run on empty events (e.g. to generate events).
        writer : dict, optional
            Writer configuration dictionary
        top_node : str, optional
            Name of the node tree the events are loaded into. If not
            specified, load them into the default tree.
        """
        # Initialize the reader
        self.reader = None
        self.log_prefix = "recoflow"
        if reader is not None:
            self.watch.initialize("read")
            self.reader = reader_factory(reader)
            self.log_prefix = self.get_prefix(self.reader.file_paths)

        self.input_node = self.server.get_top_node(top_node)

        # Initialize the data writer, if provided
        self.writer = None
        if writer is not None:
            self.watch.initialize("write")
            self.writer = writer_factory(writer, prefix=self.log_prefix)

        # Harmonize the number of iterations with the input
        if self.reader is not None:
            if self.iterations is None or self.iterations < 0:
                self.iterations = len(self.reader)
            self.iterations = min(self.iterations, len(self.reader))

    @staticmethod
    def get_prefix(file_paths):
        """Builds an appropriate output prefix based on the list of input files.

        Parameters
        ----------
        file_paths : List[str]
            List of input file paths

        Returns
        -------
        str
            Shared input summary string to be used to prefix outputs
        """
        # Fetch file base names (ignore where they live)
        file_names = [os.path.splitext(os.path.basename(f))[0] for f in file_paths]

        # If there is only one file, done
        prefix = os.path.commonprefix(file_names)
        if len(set(file_names)) == 1:
            return file_names[0]

        # Otherwise, summarize the shared prefix and the number of files
        prefix = prefix.rstrip("_-") or "recoflow"

        return f"{prefix}--{len(file_names)}"

    def initialize_log(self):
        """Initialize the output log for this driver process."""
        # Make a directory if it does not exist
        if self.log_dir and not os.path.exists(self.log_dir):
            os.makedirs(self.log_dir, exist_ok=True)

        # If requested, prefix the log name with the input file name
        log_name = "recoflow_log.csv"
        if self.prefix_log:
            log_name = f"{self.log_prefix}_{log_name}"

        # Initialize the log
        log_path = os.path.join(self.log_dir, log_name)
        self.logger = CSVWriter(log_path, overwrite=self.overwrite_log)

    def __len__(self):
        """Returns the number of events in the underlying reader object."""
        return len(self.reader) if self.reader is not None else 0

    def run(self):
        """Loop over the requested number of iterations, process them."""
        # To run the loop, must know how many times it must be done
        assert (
            self.iterations is not None
        ), "Must specify the number of `iterations` when there is no reader."

        # Initialize the output log
        self.initialize_log()

        # Initialize the modules
        self.initialize()

        # Loop and process each event
        for iteration in range(self.iterations):
            # Record the execution date/time
            tstamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

            # Process one event
            code, write = self.process(iteration)

            # Log the output
            self.log(code, write, tstamp, iteration)

            # Stop early if requested by one of the modules
            if code == ReturnCode.ABORTPROCESSING:
                logger.warning("Processing aborted at iteration %d.", iteration)
                break

        # Finalize the modules and the output
        self.finalize()

    def initialize(self):
        """Run the job initialization step of the modules."""
        if self.initialized:
            return

        code = self.reco.init()
        if code != ReturnCode.EVENT_OK:
            raise RuntimeError("Reconstruction modules failed to initialize.")

        self.initialized = True

    def process(self, entry):
        """Process one event.

        Parameters
        ----------
        entry : int
            Entry number to load

        Returns
        -------
        ReturnCode
            Outcome of the event
        bool
            Whether the event was written out
        """
        # Make sure there is no watch running, start the iteration timer
        for watch in self.watch.values():
            if watch.running:
                self.watch.reset()
                break

        self.watch.start("iteration")

        # 1. Load data into the node tree
        data = self.load(entry)
        run_number = self.run_number
        event_number = entry
        if data is not None:
            self.fill(data)
            run_number = data["run_number"] or self.run_number
            event_number = data["event_number"]

        self.server.event_number = event_number
        self.server.event_counter += 1

        # 2. Handle run transitions
        if run_number != self.current_run:
            self.begin_run(run_number)

        # 3. Pass the event through the reconstruction modules
        code, write = ReturnCode.ABORTRUN, False
        if not self.skip_run:
            self.watch.start("reco")
            code, write = self.reco.process_event()
            self.watch.stop("reco")
            self.watch.update(self.reco.watch, "reco")

            # Skip the rest of the run if requested
            if code == ReturnCode.ABORTRUN:
                logger.warning("Skipping the rest of run %d.", run_number)
                self.skip_run = True

        # 4. Write output to file, if requested
        if self.writer is not None and write:
            self.watch.start("write")
            self.writer(self.server.top_node, run_number, event_number, self.cfg)
            self.watch.stop("write")

        # Reset the per-event data
        self.reco.reset_event()

        # Stop the iteration timer
        self.watch.stop("iteration")

        return code, write

    def load(self, entry):
        """Loads one event, if there is a reader.

        Parameters
        ----------
        entry : int
            Entry number

        Returns
        -------
        dict
            Data dictionary containing the input, None if there is no reader
        """
        if self.reader is None:
            return None

        self.watch.start("read")
        data = self.reader.get(entry)
        self.watch.stop("read")

        return data

    def fill(self, data):
        """Place the objects of one event in the node tree.

        Event-level objects replace the content of existing nodes (anywhere
        under `DST`) or are added under `DST`. Run-level objects are only
        added under `RUN` if they do not already exist.

        Parameters
        ----------
        data : dict
            Data dictionary returned by the reader
        """
        dst = self.input_node.child("DST")
        for name, obj in data["dst"].items():
            node = find_first(dst, name, DataNode.node_type)
            if node is not None:
                node.data = obj
            else:
                dst.add_data(name, obj)

        run = self.input_node.child("RUN")
        for name, obj in data["run"].items():
            if find_first(run, name, DataNode.node_type) is None:
                run.add_data(name, obj)

    def begin_run(self, run_number):
        """Close the previous run, if any, and initialize a new one.

        Parameters
        ----------
        run_number : int
            Number of the run about to start
        """
        if self.current_run is not None:
            self.end_run()

        logger.info("Starting run %d", run_number)
        self.current_run = run_number
        RecoConsts.set_flag("RUNNUMBER", run_number)
        code = self.reco.init_run(run_number)
        self.skip_run = code != ReturnCode.EVENT_OK
        if self.skip_run:
            logger.error("Run %d failed to initialize, skipping it.", run_number)

    def end_run(self):
        """Close the current run and store the run-level nodes."""
        self.reco.end_run(self.current_run)
        self.reco.update_run_node()
        if self.writer is not None:
            self.writer.write_run(self.server.top_node, self.cfg)

    def finalize(self):
        """Close the last run, finalize the modules and store histograms."""
        if self.current_run is not None:
            self.end_run()
            self.current_run = None

        self.reco.end()

        hists = HistoManager.instance()
        if self.hist_file is not None and len(hists):
            hists.save(self.hist_file)

    def log(self, code, write, tstamp, iteration):
        """Log relevant information to CSV files and stdout.

        Parameters
        ----------
        code : ReturnCode
            Outcome of the event
        write : bool
            Whether the event was written out
        tstamp : str
            Time when this iteration was run
        iteration : int
            Iteration counter
        """
        # Fetch the basics
        log_dict = {
            "iter": iteration,
            "run": self.current_run,
            "event": self.server.event_number,
            "code": int(code),
            "write": int(write),
        }

        # Fetch the memory usage (in GB)
        memory = psutil.virtual_memory()
        log_dict["cpu_mem"] = memory.used / 1.0e9
        log_dict["cpu_mem_perc"] = memory.percent

        # Fetch the times
        suff = "_time"
        for key, watch in self.watch.items():
            time = watch.time if watch.stopped else None
            time_sum = watch.time_sum
            log_dict[f"{key}{suff}"] = time.wall if time is not None else -1
            log_dict[f"{key}{suff}_cpu"] = time.cpu if time is not None else -1
            log_dict[f"{key}{suff}_sum"] = time_sum.wall
            log_dict[f"{key}{suff}_sum_cpu"] = time_sum.cpu

        # Record
        self.logger.append(log_dict)

        # If requested, log out basics of the process
        if ((iteration + 1) % self.log_step) == 0:
            t_iter = self.watch.time("iteration").wall
            logger.info(
                "Iter. %d @ %s | run %s event %d | %s | %.3f s | %.2f GB (%.1f%%)",
                iteration,
                tstamp,
                self.current_run,
                self.server.event_number,
                ReturnCode(code).name,
                t_iter,
                log_dict["cpu_mem"],
                log_dict["cpu_mem_perc"],
            )
