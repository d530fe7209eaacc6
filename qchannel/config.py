"""Model constants for the queue-decoherence channel.

Component constructors and functions take keyword arguments that default to
the values below, so a caller can override any of them per call.
"""

# ---------------------------------------------------------------------------
# Queue
# ---------------------------------------------------------------------------

SERVICE_RATE = 1.0          # mean service rate μ (symbols per unit time)

# ---------------------------------------------------------------------------
# Capacity formulas
# ---------------------------------------------------------------------------

SINGULARITY_EPSILON = 1e-3  # capacity is clamped to 0 when 1 - αλ <= this
SMALL_KAPPA = 1e-6          # below this κ the M/D/1 discount uses its series

# Capacity curve grid.  Curves start at λ = 0 by default; the command line
# table uses the 0.01..0.99 plot range
CURVE_LAMBDA_MIN = 0.01
CURVE_LAMBDA_MAX = 0.99
CURVE_STEP = 0.01

# ---------------------------------------------------------------------------
# Simulation
# ---------------------------------------------------------------------------

BITS_PER_SYMBOL = 8         # each character is sent as one byte
LOG_HEAD = 3                # first symbols always kept in the diagnostic log
LOG_MAX_CORRUPTED = 32      # corrupted symbols kept after the head
PLACEHOLDER_GLYPH = "�"
DEFAULT_SEED = None         # None draws fresh OS entropy
