"""Scoring version constants, tier bands and color stops."""

RISK_CALC_VERSION = "recession_v1"

# Lower bounds (inclusive) of each tier, highest first.
TIER_BANDS = (
    (60.0, "Recession"),
    (30.0, "Warning"),
    (0.0, "Expansion"),
)

# Color stops for score 0, 50 and 100.
GREEN = (16, 185, 129)  # #10b981
AMBER = (245, 158, 11)  # #f59e0b
RED = (239, 68, 68)  # #ef4444

COLOR_MIDPOINT = 50.0
