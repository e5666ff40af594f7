"""Tools to profile the processing steps of the event loop."""

import time
from dataclasses import dataclass

__all__ = ["Time", "Stopwatch", "StopwatchManager"]


@dataclass
class Time:
    """Simple dataclass to hold time information.

    Attributes
    ----------
    wall : float, optional
         Wall time
    cpu : float, optional
         CPU time
    """

    wall: float = None
    cpu: float = None

    def __add__(self, other):
        return Time(wall=self.wall + other.wall, cpu=self.cpu + other.cpu)

    def __sub__(self, other):
        return Time(wall=self.wall - other.wall, cpu=self.cpu - other.cpu)

    def copy(self):
        """Returns an independant copy of the object."""
        return Time(wall=self.wall, cpu=self.cpu)

    @classmethod
    def current(cls):
        """Returns the current time (wall and cpu).

        Returns
        -------
        Time
           Current time
        """
        return cls(time.time(), time.process_time())


class Stopwatch:
    """Holds timing information for a specific process."""

    def __init__(self):
        """Give default values to the underlying class attributes."""
        self._start = None
        self._stop = None
        self._time = Time(0.0, 0.0)
        self._total = Time(0.0, 0.0)

    @property
    def running(self):
        """Whether the stopwatch is currently running."""
        return self._start is not None and self._stop is None

    @property
    def stopped(self):
        """Whether the stopwatch was stopped since it was last started."""
        return self._stop is not None

    def start(self, start=None):
        """Start the watch.

        Parameters
        ----------
        start : Time, optional
            Start time. If not specified, use the current time
        """
        if self.running:
            raise ValueError("Cannot restart a watch that has not been stopped.")

        self._start = start if start is not None else Time.current()
        self._stop = None

    def stop(self, stop=None):
        """Stop the watch, accumulate the elapsed time.

        Parameters
        ----------
        stop : Time, optional
            Stop time. If not specified, use the current time
        """
        if self._start is None:
            raise ValueError("Cannot stop a watch that has not been started.")
        if self._stop is not None:
            raise ValueError("Cannot stop a watch more than once.")

        self._stop = stop if stop is not None else Time.current()
        self._time = self._stop - self._start
        self._total += self._time

    @property
    def time(self):
        """Time between the last start and the last stop."""
        if self._stop is None:
            raise ValueError("Cannot get time of watch that has not been stopped.")

        return self._time

    @property
    def time_sum(self):
        """Sum of times between all watch starts and stops."""
        return self._total


class StopwatchManager:
    """Organizes a set of named stopwatches."""

    def __init__(self):
        """Initalize the basic private stopwatch attributes."""
        self._watch = {}

    def __contains__(self, key):
        return key in self._watch

    def keys(self):
        """Get the list of all initialized stopwatch tags."""
        return self._watch.keys()

    def values(self):
        """Get the list of all initialized stopwatches."""
        return self._watch.values()

    def items(self):
        """Get the list of (tag, stopwatch) pairs."""
        return self._watch.items()

    def initialize(self, key):
        """Initialize one or more stopwatches.

        Parameters
        ----------
        key : Union[str, List[str]]
            Key or list of keys to initialize a `Stopwatch` for
        """
        keys = [key] if isinstance(key, str) else key
        for k in keys:
            self._watch[k] = Stopwatch()

    def reset(self, key=None):
        """Reset one or more stopwatches to their initial state.

        Parameters
        ----------
        key : Union[str, List[str]], optional
            Key or list of keys to reset. If None, reset all stopwatches.
        """
        key = list(self.keys()) if key is None else key
        keys = [key] if isinstance(key, str) else key
        for k in keys:
            self._check(k)
            self._watch[k] = Stopwatch()

    def start(self, key):
        """Start the stopwatch registered under a key.

        Parameters
        ----------
        key : str
            Key for which to start the clock
        """
        self._check(key)
        self._watch[key].start()

    def stop(self, key):
        """Stop the stopwatch registered under a key.

        Parameters
        ----------
        key : str
            Key for which to stop the clock
        """
        self._check(key)
        self._watch[key].stop()

    def time(self, key):
        """Returns the time recorded between the last start and stop."""
        self._check(key)
        return self._watch[key].time

    def time_sum(self, key):
        """Returns the sum of times recorded between each start/stop pairs."""
        self._check(key)
        return self._watch[key].time_sum

    def update(self, other, prefix=None):
        """Updates this manager with the stopwatches of another manager.

        Parameters
        ----------
        other : StopwatchManager
             Other stopwatch manager
        prefix : str, optional
             String to prefix the timer keys with
        """
        for key, value in other.items():
            name = key if prefix is None else f"{prefix}_{key}"
            self._watch[name] = value

    def _check(self, key):
        if key not in self._watch:
            raise KeyError(f"No stopwatch initialized under the name: {key}")
