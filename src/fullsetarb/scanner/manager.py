"""Scan orchestrator - builds HTTP clients, detector and cycle from settings."""

from __future__ import annotations

import structlog

from fullsetarb.config import Settings
from fullsetarb.ingestion.base import OpportunitySink
from fullsetarb.ingestion.polymarket.clob import ClobBookClient
from fullsetarb.ingestion.polymarket.gamma import GammaCatalog
from fullsetarb.ingestion.rate_limit import TokenBucket
from fullsetarb.scanner.cycle import CycleResult, ScanCycle
from fullsetarb.scanner.detector import OpportunityDetector

log = structlog.get_logger(__name__)


class ScanManager:
    """Owns the venue clients for the life of the process and runs scan cycles."""

    def __init__(self, settings: Settings, sink: OpportunitySink):
        self.settings = settings
        self.limiter = TokenBucket(rate=settings.requests_per_sec, capacity=settings.burst)
        self.catalog = GammaCatalog(
            base_url=settings.gamma_api_base,
            page_size=settings.catalog_page_size,
            timeout=settings.http_timeout_sec,
        )
        self.books = ClobBookClient(
            base_url=settings.clob_api_base,
            timeout=settings.http_timeout_sec,
            limiter=self.limiter,
        )
        self.detector = OpportunityDetector(
            self.books,
            payout=settings.payout,
            price_scale=settings.price_scale,
            web_base=settings.web_base,
        )
        self.cycle = ScanCycle(self.catalog, self.detector, sink, concurrency=settings.concurrency)

    async def run_cycle(self) -> CycleResult:
        result = await self.cycle.run()
        log.info(
            "cycle_summary",
            candidates=result.candidates,
            evaluated=result.evaluated,
            failed=result.failed,
            found=result.found,
            saved=result.saved,
            duration_sec=round(result.duration_sec, 2),
        )
        return result

    async def aclose(self) -> None:
        await self.catalog.aclose()
        await self.books.aclose()
