"""Framework modules which fill the event, run and synchronization headers."""

from .flags import *
from .head import *
from .sync import *
