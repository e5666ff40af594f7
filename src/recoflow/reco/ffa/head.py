"""Creates and fills the run and event headers."""

from recoflow.data import EventHeader, PHHepMCGenEventMap, PrdfEvent, RunHeader
from recoflow.node import MissingNodeError, RecoConsts, RecoServer, get_class
from recoflow.reco.base import SubsysReco
from recoflow.utils.enums import ReturnCode
from recoflow.utils.logger import logger

__all__ = ["HeadReco"]


class HeadReco(SubsysReco):
    """Creates the `RunHeader` (under `RUN`) and `EventHeader` (under `DST`)
    nodes and fills them.

    The headers are created at :meth:`init` rather than :meth:`init_run`,
    as input managers may need the event header before the run starts.
    """

    name = "head_reco"
    aliases = ("HeadReco",)

    def init(self, top_node):
        top_node.child("RUN").add_data("RunHeader", RunHeader())
        top_node.child("DST").add_data("EventHeader", EventHeader())

        return ReturnCode.EVENT_OK

    def init_run(self, top_node):
        """Set the run number of the run header from the `RUNNUMBER` flag."""
        run_header = get_class(top_node, "RunHeader", RunHeader)
        if run_header is None:
            raise MissingNodeError("RunHeader", "RunHeader")

        run_header.run_number = RecoConsts.get_int_flag("RUNNUMBER")

        return ReturnCode.EVENT_OK

    def process_event(self, top_node):
        """Fill the event header of one event.

        The collision information is taken from the foreground generator
        event (embedding id 0) if any, otherwise the event type is taken from
        the raw data event.
        """
        server = RecoServer.instance()
        header = get_class(top_node, "EventHeader", EventHeader)
        if header is None:
            raise MissingNodeError("EventHeader", "EventHeader")

        gen_map = get_class(top_node, "PHHepMCGenEventMap", PHHepMCGenEventMap)
        if gen_map is not None:
            for _, gen_event in reversed(gen_map):
                if gen_event.embedding_id != 0:
                    continue
                if gen_event.event is None or gen_event.event.heavy_ion is None:
                    continue

                heavy_ion = gen_event.event.heavy_ion
                header.impact_parameter = heavy_ion.impact_parameter
                header.event_plane_angle = heavy_ion.event_plane_angle
                if gen_event.flow_psi:
                    for n in range(1, 7):
                        header.set_flow_psi(n, gen_event.get_flow_psi(n))
                header.eccentricity = heavy_ion.eccentricity
                header.ncoll = heavy_ion.ncoll
                header.npart = heavy_ion.npart_targ + heavy_ion.npart_proj

        else:
            raw_event = get_class(top_node, "PRDF", PrdfEvent)
            if raw_event is not None:
                header.evt_type = raw_event.evt_type

        header.run_number = server.run_number
        header.evt_sequence = server.event_number
        if self.verbosity > 0:
            logger.info(header.identify())

        return ReturnCode.EVENT_OK
