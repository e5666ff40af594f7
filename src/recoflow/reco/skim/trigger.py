"""Selects events based on the global level-1 trigger bits."""

from recoflow.data import Gl1Packet
from recoflow.node import get_class
from recoflow.reco.base import SubsysReco
from recoflow.utils.enums import ReturnCode
from recoflow.utils.logger import logger

__all__ = ["TriggerDSTSkimmer"]


class TriggerDSTSkimmer(SubsysReco):
    """Keeps events for which at least one of the requested triggers fired
    (after prescaling). All other events are aborted, so that they are not
    written to the output.

    .. code-block:: yaml

        skim:
          module: trigger_dst_skimmer
          trigger_bits: [10, 12]
          max_accept: 1000
    """

    name = "trigger_dst_skimmer"
    aliases = ("TriggerDSTSkimmer",)

    def __init__(self, trigger_bits=(10,), max_accept=-1, **kwargs):
        """Initialize the skimmer.

        Parameters
        ----------
        trigger_bits : List[int], default [10]
            Indices of the GL1 triggers which select an event
        max_accept : int, default -1
            Maximum number of accepted events. If negative, no limit.
        **kwargs : dict, optional
            Base module parameters
        """
        super().__init__(**kwargs)
        self.trigger_bits = list(trigger_bits)
        self.max_accept = max_accept
        self.num_events = 0
        self.num_accepted = 0

    @property
    def use_max_accept(self):
        return self.max_accept >= 0

    def process_event(self, top_node):
        self.num_events += 1
        if self.use_max_accept and self.num_accepted >= self.max_accept:
            return ReturnCode.ABORTEVENT

        packet = get_class(top_node, "GL1Packet", Gl1Packet)
        if packet is None:
            logger.warning("%s: GL1Packet node is missing.", self.name)
            return ReturnCode.ABORTEVENT

        if not any(packet.scaled_bit(bit) for bit in self.trigger_bits):
            if self.verbosity > 1:
                logger.info("Event %d rejected.", self.num_events)
            return ReturnCode.ABORTEVENT

        self.num_accepted += 1

        return ReturnCode.EVENT_OK

    def end(self, top_node):
        logger.info(
            "%s: accepted %d out of %d events.",
            self.name,
            self.num_accepted,
            self.num_events,
        )

        return ReturnCode.EVENT_OK
