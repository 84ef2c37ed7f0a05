"""Fixed-point constants and default risk parameters."""

PRECISION = 10**18

# Feed prices are rescaled to this many decimals before any arithmetic.
FEED_TARGET_DECIMALS = 18

LIQUIDATION_THRESHOLD = 50  # 200% overcollateralized
LIQUIDATION_PRECISION = 100
LIQUIDATION_BONUS = 10  # 10% of seized collateral

MIN_HEALTH_FACTOR = 10**18
MAX_HEALTH_FACTOR = 2**256 - 1

# Custody account that holds every deposited collateral unit.
ENGINE_CUSTODY = "cdp-engine"
