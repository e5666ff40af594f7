"""Utility functions and tools used across the recoflow package.

**Core Utilities:**
- `logger`: Logging configuration shared by every module
- `factory`: Generic name -> class instantiation from configuration blocks
- `stopwatch`: Wall/CPU time measurements of processing steps
- `globals`: Global constants (detector numbering, default radii, etc.)
- `enums`: Enumerated types (return codes, tracker identifiers, etc.)
"""
