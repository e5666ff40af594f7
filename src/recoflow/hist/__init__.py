"""Histograms filled by the quality-assurance modules."""

from .hist import Hist1D
from .manager import HistoManager
