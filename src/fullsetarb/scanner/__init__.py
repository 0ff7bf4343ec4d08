"""Fullset arbitrage detection and the scan cycle that drives it."""

from fullsetarb.scanner.cycle import CycleResult, ScanCycle
from fullsetarb.scanner.detector import OpportunityDetector, market_link

__all__ = ["CycleResult", "OpportunityDetector", "ScanCycle", "market_link"]
