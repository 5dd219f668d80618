"""Scoring version constants and defaults."""

SCI_CALC_VERSION = "sci_v1"

# Trend labels
TREND_IMPROVING = "improving"
TREND_DECLINING = "declining"
TREND_STABLE = "stable"
TREND_UNKNOWN = "unknown"

# Raw metrics counted in the batch statistics
LAUNCH_CAPABLE_FLAG = "independent_launch_capable"
HUMAN_SPACEFLIGHT_FLAG = "human_spaceflight_capable"
