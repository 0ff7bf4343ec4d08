"""Venue ingestion: catalog discovery and order book polling."""
