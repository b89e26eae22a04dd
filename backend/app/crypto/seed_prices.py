"""Seed prices and per-pair parameters for the price simulator."""

# Rough starting prices keyed by pair id
SEED_PRICES: dict[str, float] = {
    "eth-usdc": 3200.00,
    "eth-usdt": 3200.00,
    "eth-btc": 0.0520,
}

# Per-pair GBM parameters
# sigma: annualized volatility (higher = more price movement)
# mu: annualized drift / expected return
PAIR_PARAMS: dict[str, dict[str, float]] = {
    "eth-usdc": {"sigma": 0.65, "mu": 0.05},
    "eth-usdt": {"sigma": 0.65, "mu": 0.05},
    "eth-btc": {"sigma": 0.45, "mu": 0.0},  # Cross rate, damped
}

# Default parameters for pairs not in the tables above
DEFAULT_PARAMS: dict[str, float] = {"sigma": 0.60, "mu": 0.05}

# Pairs quoted in dollar stablecoins track each other almost exactly
STABLECOIN_QUOTES: set[str] = {"USDC", "USDT"}

# Correlation coefficients
STABLE_QUOTE_CORR = 0.95  # ETH/USDC vs ETH/USDT
CROSS_QUOTE_CORR = 0.5  # ETH/<stable> vs ETH/BTC
DEFAULT_CORR = 0.3

# Crypto trades around the clock: 365 days * 24 hours * 3600 seconds
SECONDS_PER_YEAR = 365 * 24 * 3600
