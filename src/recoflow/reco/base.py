"""Base class of all the reconstruction modules."""

from recoflow.utils.enums import ReturnCode

__all__ = ["SubsysReco"]


class SubsysReco:
    """Base class of a reconstruction module.

    A module is driven through its life cycle by the
    :class:`recoflow.reco.manager.RecoManager`. Each step receives the top
    of the node tree and returns a :class:`ReturnCode`. The default
    implementation of every step does nothing and returns `EVENT_OK`.

    Attributes
    ----------
    name : str
        Name of the module instance (the class-level `name` is the name under
        which the module is registered in the factory)
    verbosity : int
        Verbosity level of the module, gates detailed logging
    top_node_name : str
        Name of the node tree the module runs on, the default tree if None
    """

    # Name of the module, as specified in the configuration
    name = None

    # Alternative allowed names of the module
    aliases = ()

    def __init__(self, name=None, verbosity=0, top_node_name=None):
        """Initialize the module.

        Parameters
        ----------
        name : str, optional
            Name of the instance, defaults to the registered module name
        verbosity : int, default 0
            Verbosity level of the module
        top_node_name : str, optional
            Name of the node tree the module runs on
        """
        if name is None:
            name = type(self).name or type(self).__name__
        self.name = name
        self.verbosity = verbosity
        self.top_node_name = top_node_name

    def init(self, top_node):
        """Called once at the start of the job."""
        return ReturnCode.EVENT_OK

    def init_run(self, top_node):
        """Called at the start of each run."""
        return ReturnCode.EVENT_OK

    def process_event(self, top_node):
        """Called for each event."""
        return ReturnCode.EVENT_OK

    def reset_event(self, top_node):
        """Called after each event, once all modules processed it."""
        return ReturnCode.EVENT_OK

    def end_run(self, run_number):
        """Called at the end of each run."""
        return ReturnCode.EVENT_OK

    def end(self, top_node):
        """Called once at the end of the job."""
        return ReturnCode.EVENT_OK

    def update_run_node(self, top_node):
        """Called before the run node is written out."""
        return ReturnCode.EVENT_OK

    def identify(self):
        return f"{type(self).__name__}: {self.name}"
