# rockwatch/constants.py
"""
Default risk-model constants. Chosen for plausibility, not calibrated against
field data. Every value here can be overridden through Settings.
"""

# Feature importance weights (sum to 1.0)
DEFAULT_WEIGHTS = {
    "displacement": 0.25,
    "strain": 0.20,
    "pore_pressure": 0.15,
    "rainfall": 0.15,
    "temperature": 0.10,
    "dem_slope": 0.10,
    "crack_score": 0.05,
}

# Normalisation ceilings — value / ceiling, clamped to [0, 1]
DEFAULT_CEILINGS = {
    "displacement": 20.0,
    "strain": 500.0,
    "pore_pressure": 100.0,
    "rainfall": 100.0,
    "temperature": 50.0,
    "dem_slope": 90.0,
    "crack_score": 10.0,
}

# Per-parameter low / medium / high thresholds
DEFAULT_THRESHOLDS = {
    "displacement": {"low": 3, "medium": 6, "high": 10},
    "strain": {"low": 150, "medium": 250, "high": 350},
    "pore_pressure": {"low": 50, "medium": 70, "high": 90},
    "rainfall": {"low": 20, "medium": 40, "high": 60},
    "crack_score": {"low": 3, "medium": 6, "high": 8},
}
