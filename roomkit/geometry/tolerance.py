from __future__ import annotations

# Positional epsilon for near-zero distance/length checks.
EPS_POS = 1e-12

# Angular epsilon (dimensionless tolerance used for parallel/orthogonality checks).
EPS_ANG = 1e-9

# Area epsilon for degenerate polygon checks.
EPS_AREA = 1e-12

# Point coincidence tolerance for loop rebuilding, overlap breaking and joins.
EPS_COINCIDENT = 1e-4

# Tolerance of the canonical-direction comparer.
EPS_DIRECTION = 1e-6

# Product-of-inertia threshold below which axes are treated as X/Y aligned.
EPS_MOMENT = 1e-7

# Turn tolerance for the rectangularity walk (about 0.06 degrees).
EPS_RECT = 1e-3

# Sign threshold used when canonicalising a principal axis to non-negative X.
EPS_AXIS_SIGN = 1e-3

# Length below which a principal axis is considered undefined.
EPS_AXIS_LENGTH = 1e-5

# |cos| tolerance used to bin edge directions in the direction histogram.
EPS_DIRECTION_BIN = 1e-4

# Boundary pieces shorter than this do not receive a finish wall.
MIN_FINISH_SEGMENT = 1e-3

# Minimal solid volume / footprint area accepted as obstruction geometry.
MIN_SOLID_SIZE = 1e-6
