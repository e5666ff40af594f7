"""Defines constants used across the package."""

# Bit layout of the tracker hitset keys
TRKR_ID_BITS = 8
TRKR_ID_SHIFT = 24
LAYER_BITS = 8
LAYER_SHIFT = 16
HITSET_KEY_SHIFT = 32
CLUSTER_INDEX_MASK = 0xFFFFFFFF

# Tracker layer ranges (inclusive)
MVTX_LAYERS = (0, 2)
INTT_LAYERS = (3, 6)
TPC_LAYERS = (7, 54)
MICROMEGAS_LAYERS = (55, 56)

# First TPC readout layer
TPC_FIRST_LAYER = TPC_LAYERS[0]

# Number of readout layers per TPC region
TPC_LAYERS_PER_REGION = 16

# Default TPC region boundaries (cm)
TPC_INNER_MIN_RADIUS = 30.0
TPC_MID_MIN_RADIUS = 40.0
TPC_OUTER_MIN_RADIUS = 60.0
TPC_OUTER_MAX_RADIUS = 76.4

# Tolerance used to pick between two circle intersections (cm)
INTERSECTION_TOLERANCE = 5.0

# Number of MVTX chips per stave
MVTX_CHIPS_PER_STAVE = 9

# Generator-level constants
STABLE_STATUS = 1
NEUTRINO_PDG_RANGE = (12, 18)
JET_RADIUS = 0.4
JET_MAX_ABS_ETA = 1.1
