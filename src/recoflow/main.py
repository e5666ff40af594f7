"""Main functions that call the Driver class.

This is the first module called when launching the command-line interface.
It takes care of setting up the `Driver` object used to run the
reconstruction modules over the input events.
"""

from .driver import Driver
from .utils.logger import logger


def run(cfg):
    """Process events with the modules of a configuration.

    Parameters
    ----------
    cfg : dict
        Full driver configuration
    """
    # Set the verbosity of the logger before anything is built
    verbosity = cfg.get("base", {}).get("verbosity", "info")
    logger.setLevel(verbosity.upper())

    # Prepare the driver and run the event loop
    driver = Driver(cfg)
    driver.run()

    return driver
