"""Manages the operation of reconstruction modules."""

from collections import OrderedDict
from copy import deepcopy

import numpy as np

from recoflow.node import RecoServer
from recoflow.utils.enums import ReturnCode
from recoflow.utils.logger import logger
from recoflow.utils.stopwatch import StopwatchManager

from .factories import reco_factory

__all__ = ["RecoManager"]


class RecoManager:
    """Manager in charge of running the reconstruction modules.

    It loads all the modules once and calls each of their processing steps
    in order. The modules are ordered by decreasing priority, then by order
    of appearance in the configuration.

    It takes a configuration dictionary of the form:

    .. code-block:: yaml

        reco:
          head:
            module: head_reco
          mvtx_cluster_pruner:
            use_strict_matching: true
            priority: 1
          ...
    """

    def __init__(self, cfg):
        """Initialize the reconstruction manager.

        Parameters
        ----------
        cfg : dict
            Reconstruction module configurations
        """
        # Loop over the modules and get their priorities
        cfg = deepcopy(cfg) if cfg is not None else {}
        keys = np.array(list(cfg.keys()), dtype=object)
        priorities = -np.ones(len(keys), dtype=np.int32)
        for i, key in enumerate(keys):
            if cfg[key] is not None and "priority" in cfg[key]:
                priorities[i] = cfg[key].pop("priority")

        # Add the modules to a module list in decreasing order of priority
        self.watch = StopwatchManager()
        self.modules = OrderedDict()
        for key in keys[np.argsort(-priorities, kind="stable")]:
            self.watch.initialize(key)
            self.modules[key] = reco_factory(key, cfg[key])

    def __len__(self):
        return len(self.modules)

    def __contains__(self, key):
        return key in self.modules

    def __getitem__(self, key):
        return self.modules[key]

    @staticmethod
    def get_top_node(module):
        """Returns the node tree a module runs on."""
        return RecoServer.instance().get_top_node(module.top_node_name)

    def init(self):
        """Run the job initialization step of every module.

        Returns
        -------
        ReturnCode
            `EVENT_OK` if all the modules initialized successfully,
            `ABORTRUN` otherwise
        """
        for key, module in self.modules.items():
            code = ReturnCode(module.init(self.get_top_node(module)))
            if code != ReturnCode.EVENT_OK:
                logger.error("Module %s returned %s at init.", key, code.name)
                return ReturnCode.ABORTRUN

        return ReturnCode.EVENT_OK

    def init_run(self, run_number):
        """Run the run initialization step of every module.

        Parameters
        ----------
        run_number : int
            Number of the run about to start

        Returns
        -------
        ReturnCode
            `EVENT_OK` if all the modules initialized successfully,
            `ABORTRUN` otherwise
        """
        RecoServer.instance().run_number = run_number
        for key, module in self.modules.items():
            code = ReturnCode(module.init_run(self.get_top_node(module)))
            if code != ReturnCode.EVENT_OK:
                logger.error(
                    "Module %s returned %s at the start of run %d.",
                    key,
                    code.name,
                    run_number,
                )
                return ReturnCode.ABORTRUN

        return ReturnCode.EVENT_OK

    def process_event(self):
        """Pass one event through the modules.

        Returns
        -------
        ReturnCode
            Outcome of the event for the event loop
        bool
            Whether the event should be written out
        """
        result, write = ReturnCode.EVENT_OK, True
        for key, module in self.modules.items():
            self.watch.start(key)
            code = ReturnCode(module.process_event(self.get_top_node(module)))
            self.watch.stop(key)

            if code == ReturnCode.EVENT_OK:
                continue

            if module.verbosity > 0 or code > ReturnCode.ABORTEVENT:
                logger.info("Module %s returned %s.", key, code.name)

            if code in (ReturnCode.DISCARDEVENT, ReturnCode.DONOTWRITEEVENT):
                result, write = code, False

            else:
                # Any abort stops the processing of this event
                return code, False

        return result, write

    def reset_event(self):
        """Reset the modules and the per-event nodes of every tree."""
        for module in self.modules.values():
            module.reset_event(self.get_top_node(module))

        RecoServer.instance().reset_event()

    def update_run_node(self):
        """Let the modules update their run-level nodes before writing."""
        for module in self.modules.values():
            module.update_run_node(self.get_top_node(module))

    def end_run(self, run_number):
        """Run the end-of-run step of every module."""
        for module in self.modules.values():
            module.end_run(run_number)

    def end(self):
        """Run the end-of-job step of every module."""
        for module in self.modules.values():
            module.end(self.get_top_node(module))
