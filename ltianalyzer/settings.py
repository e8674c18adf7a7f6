"""Numerical tolerances and default analysis parameters."""

# =============================================================================
# ALGEBRA
# =============================================================================

# Squared magnitude below which a complex division is treated as singular
DIVISION_EPS = 1e-10

# Leading coefficients below this are stripped before root finding
LEADING_COEFF_EPS = 1e-12

# Coefficients below this are omitted when formatting polynomials
DISPLAY_EPS = 1e-10

# =============================================================================
# ROOT SOLVER (Durand-Kerner)
# =============================================================================

DK_TOLERANCE = 1e-10
DK_MAX_ITERATIONS = 100

# =============================================================================
# TIME RESPONSE
# =============================================================================

DEFAULT_END_TIME = 15.0   # s
DEFAULT_TIME_STEP = 0.05  # s

# |zeta - 1| below this is treated as critically damped
CRITICAL_DAMPING_TOL = 1e-8

# Second-order sinusoidal transients are dropped after this many time constants
TRANSIENT_CUTOFF_TIME_CONSTANTS = 10.0

DEFAULT_SIN_FREQUENCY = 1.0  # rad/s
DEFAULT_SIN_AMPLITUDE = 1.0

# =============================================================================
# RESPONSE CHARACTERISTICS
# =============================================================================

SETTLING_TOLERANCE = 0.02   # 2% band
OVERSHOOT_THRESHOLD = 1.01  # peak must exceed final value by 1%
MIN_FINAL_VALUE = 1e-3      # below this a step response is considered flat

# =============================================================================
# FREQUENCY RESPONSE
# =============================================================================

DEFAULT_FREQ_MIN = 0.1     # rad/s
DEFAULT_FREQ_MAX = 1000.0  # rad/s
DEFAULT_POINTS_PER_DECADE = 50

MAGNITUDE_FLOOR = 1e-12
CORNER_SLOPE_THRESHOLD = 10.0  # dB/decade
MAX_CORNER_FREQUENCIES = 5

# =============================================================================
# ROOT LOCUS
# =============================================================================

DEFAULT_K_MIN = 0.0
DEFAULT_K_MAX = 50.0
DEFAULT_LOCUS_STEPS = 200
MAX_LOCUS_STEPS = 2000

# Match radius as a fraction of the open-loop pole/zero scale
LOCUS_MATCH_FRACTION = 0.5

# =============================================================================
# ROUTH / HURWITZ
# =============================================================================

ROUTH_EPS = 1e-12
