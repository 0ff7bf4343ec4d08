"""fullset-arb - Polymarket fullset arbitrage scanner."""

__version__ = "0.1.0"
