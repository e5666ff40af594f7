"""Quality-assurance modules."""

from .residuals import *
