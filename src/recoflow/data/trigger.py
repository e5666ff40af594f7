"""Global level-1 trigger information."""

from dataclasses import dataclass

from .base import DataBase

__all__ = ["Gl1Packet"]


@dataclass(eq=False)
class Gl1Packet(DataBase):
    """Trigger bits recorded by the global level-1 trigger.

    Attributes
    ----------
    event_number : int
        Trigger event number
    bunch_number : int
        Beam crossing number
    live_vector : int
        64-bit mask of the triggers which fired
    scaled_vector : int
        64-bit mask of the triggers which fired and survived prescaling
    """

    event_number: int = 0
    bunch_number: int = 0
    live_vector: int = 0
    scaled_vector: int = 0

    def scaled_bit(self, index):
        """Whether the trigger of a given index fired after prescaling."""
        if not 0 <= index < 64:
            raise ValueError(f"Trigger index out of range [0, 63]: {index}")
        return bool((self.scaled_vector >> index) & 1)

    def live_bit(self, index):
        """Whether the trigger of a given index fired before prescaling."""
        if not 0 <= index < 64:
            raise ValueError(f"Trigger index out of range [0, 63]: {index}")
        return bool((self.live_vector >> index) & 1)
