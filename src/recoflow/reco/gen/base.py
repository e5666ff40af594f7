"""Shared event loop of the generator-level event filters."""

from recoflow.data import PHHepMCGenEventMap
from recoflow.node import get_class
from recoflow.reco.base import SubsysReco
from recoflow.utils.enums import ReturnCode

__all__ = ["GenTriggerBase"]


class GenTriggerBase(SubsysReco):
    """Base class of the filters which accept or reject generated events.

    Every generated event of the `PHHepMCGenEventMap` node must pass the
    filter for the event to be kept.

    Attributes
    ----------
    threshold : float
        Trigger threshold (meaning depends on the filter)
    goal_event_number : int
        Number of accepted events after which all events are rejected
    set_event_limit : bool
        Whether to stop accepting events once the goal is reached
    n_evts : int
        Number of events seen
    n_good : int
        Number of events accepted, or of generated sub-events accepted if
        `count_sub_events` is True
    """

    # Whether each accepted generated sub-event counts towards the goal
    count_sub_events = False

    def __init__(
        self, threshold=0.0, goal_event_number=1000, set_event_limit=False, **kwargs
    ):
        """Initialize the filter.

        Parameters
        ----------
        threshold : float, default 0.0
            Trigger threshold
        goal_event_number : int, default 1000
            Number of events to accept when `set_event_limit` is True
        set_event_limit : bool, default False
            Whether to stop accepting events after `goal_event_number`
        **kwargs : dict, optional
            Base module parameters
        """
        super().__init__(**kwargs)
        self.threshold = threshold
        self.goal_event_number = goal_event_number
        self.set_event_limit = set_event_limit
        self.n_evts = 0
        self.n_good = 0

    def process_event(self, top_node):
        """Apply the filter to one event.

        Returns
        -------
        ReturnCode
            `EVENT_OK` if the event is accepted, `ABORTEVENT` otherwise
        """
        self.n_evts += 1
        if self.set_event_limit and self.n_good >= self.goal_event_number:
            return ReturnCode.ABORTEVENT

        gen_map = get_class(top_node, "PHHepMCGenEventMap", PHHepMCGenEventMap)
        if gen_map is None:
            return ReturnCode.ABORTEVENT

        good_event = False
        for _, gen_event in gen_map:
            if gen_event is None or gen_event.event is None:
                return ReturnCode.ABORTEVENT

            good_event = self.is_good_event(gen_event.event)
            if not good_event:
                return ReturnCode.ABORTEVENT
            if self.count_sub_events:
                self.n_good += 1

        if good_event and not self.count_sub_events:
            self.n_good += 1

        return ReturnCode.EVENT_OK

    def is_good_event(self, event):
        """Whether one generated event passes the filter."""
        raise NotImplementedError
