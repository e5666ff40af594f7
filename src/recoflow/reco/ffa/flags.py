"""Persists the job flags in the run tree."""

from recoflow.data import FlagSave
from recoflow.node import RecoConsts, get_class
from recoflow.reco.base import SubsysReco
from recoflow.utils.enums import ReturnCode
from recoflow.utils.logger import logger

__all__ = ["FlagHandler"]


class FlagHandler(SubsysReco):
    """Synchronizes the job flags with the `Flags` node under `RUN`.

    If the node does not exist at the start of a run, it is created from the
    current :class:`RecoConsts`. If it exists (e.g. read back from an input
    file), its flags are copied into :class:`RecoConsts`.
    """

    name = "flag_handler"
    aliases = ("FlagHandler",)

    def init_run(self, top_node):
        run = top_node.child("RUN")
        flags = get_class(run, "Flags", FlagSave)
        if flags is None:
            run.add_data("Flags", FlagSave(flags=RecoConsts.flags()))
        else:
            for key, value in flags.flags.items():
                RecoConsts.set_flag(key, value)

        return ReturnCode.EVENT_OK

    def update_run_node(self, top_node):
        return self.fill_from_consts(top_node)

    def end(self, top_node):
        return self.fill_from_consts(top_node)

    def fill_from_consts(self, top_node):
        """Overwrite the content of the `Flags` node with the current flags."""
        flags = get_class(top_node, "Flags", FlagSave)
        if flags is not None:
            flags.flags = RecoConsts.flags()
            if self.verbosity > 0:
                logger.info("Stored flags:\n%s", RecoConsts.print_flags())

        return ReturnCode.EVENT_OK
