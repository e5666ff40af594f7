"""Module which contains enumerated variables shared across the project."""

from enum import IntEnum

__all__ = ["ReturnCode", "TrkrId", "SegmentationType"]


class ReturnCode(IntEnum):
    """Enumerates the codes a reconstruction module may return to the
    manager after any of its processing steps.
    """

    DISCARDEVENT = -1
    EVENT_OK = 0
    ABORTEVENT = 1
    ABORTRUN = 2
    ABORTPROCESSING = 3
    DONOTWRITEEVENT = 4


class TrkrId(IntEnum):
    """Enumerates the tracking subsystems."""

    MVTX = 0
    INTT = 1
    TPC = 2
    MICROMEGAS = 3


class SegmentationType(IntEnum):
    """Enumerates the two micromegas strip orientations."""

    SEGMENTATION_Z = 0
    SEGMENTATION_PHI = 1

