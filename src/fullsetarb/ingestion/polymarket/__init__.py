"""Polymarket Gamma (catalog) and CLOB (order book) REST clients."""
