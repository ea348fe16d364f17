"""Fixed-point constants shared by the pricing and engine modules."""

# 18-decimal fixed point used for USD values, token amounts and health factors.
PRECISION = 10**18

# Token amounts are 18-decimal integers; collateral with other precisions is unsupported.
TOKEN_DECIMALS = 18

# Standard feed precision (8 decimals) and the factor lifting it to PRECISION.
FEED_DECIMALS = 8
ADDITIONAL_FEED_PRECISION = 10**10

# Only this share of raw collateral value counts toward solvency.
LIQUIDATION_THRESHOLD = 50
LIQUIDATION_PRECISION = 100

# Extra collateral, in percent of the seized amount, paid to a liquidator.
LIQUIDATION_BONUS = 10

MIN_HEALTH_FACTOR = PRECISION

# Returned for accounts without debt.
MAX_HEALTH_FACTOR = 2**256 - 1

# Three hours, the heartbeat tolerance of the reference oracle library.
DEFAULT_PRICE_TIMEOUT_SECONDS = 3 * 60 * 60
