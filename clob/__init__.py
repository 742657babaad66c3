"""Building blocks for a central limit order book: fixed-point decimals, order types, market states, fees, stop orders and engine events."""

__version__ = "0.1.0"