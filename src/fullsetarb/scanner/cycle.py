"""One scan cycle: catalog -> bounded worker pool of detectors -> persistence."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field

import structlog

from fullsetarb.ingestion.base import CandidateSource, OpportunitySink
from fullsetarb.models import Opportunity, TokenPair
from fullsetarb.scanner.detector import OpportunityDetector

log = structlog.get_logger(__name__)


@dataclass
class CycleResult:
    """Counters for one completed cycle."""

    candidates: int = 0
    evaluated: int = 0
    failed: int = 0
    saved: int = 0
    duration_sec: float = 0.0
    opportunities: list[Opportunity] = field(default_factory=list)

    @property
    def found(self) -> int:
        return len(self.opportunities)


class ScanCycle:
    """Runs a full pass over the catalog.

    Candidates are streamed into a queue consumed by `concurrency` workers. Request
    rate is bounded separately by the book client's token bucket. A catalog failure
    propagates and aborts the cycle before anything is saved.
    """

    def __init__(
        self,
        catalog: CandidateSource,
        detector: OpportunityDetector,
        sink: OpportunitySink,
        concurrency: int = 4,
    ) -> None:
        self.catalog = catalog
        self.detector = detector
        self.sink = sink
        self.concurrency = max(1, concurrency)

    async def _worker(self, queue: asyncio.Queue[TokenPair], result: CycleResult) -> None:
        while True:
            pair = await queue.get()
            try:
                opp = await self.detector.evaluate(pair)
                result.evaluated += 1
                if opp is not None:
                    result.opportunities.append(opp)
            except Exception as e:
                result.failed += 1
                log.warning(
                    "pair_failed",
                    market_id=pair.market_id,
                    direction=pair.direction.value,
                    error=str(e),
                )
            finally:
                queue.task_done()

    async def run(self) -> CycleResult:
        started = time.monotonic()
        result = CycleResult()
        queue: asyncio.Queue[TokenPair] = asyncio.Queue(maxsize=self.concurrency * 2)
        workers = [
            asyncio.create_task(self._worker(queue, result)) for _ in range(self.concurrency)
        ]
        try:
            async for pair in self.catalog.fetch_candidates():
                result.candidates += 1
                await queue.put(pair)
            await queue.join()
        finally:
            for w in workers:
                w.cancel()
            await asyncio.gather(*workers, return_exceptions=True)

        if result.opportunities:
            result.saved = self.sink.save(result.opportunities)
            log.info("opportunities_saved", found=result.found, saved=result.saved)
        else:
            log.info("no_opportunities")
        result.duration_sec = time.monotonic() - started
        return result
