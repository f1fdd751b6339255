"""Extraction coordinator - single-pass processing of one inbound message"""

import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from typing import Callable, List, Optional, Sequence
from sms_pipeline.extractors.base import ExtractorStrategy
from sms_pipeline.models.candidate import CandidateRecord
from sms_pipeline.models.outcome import ExtractionOutcome, ProcessingStatus
from sms_pipeline.pipeline.account_matcher import AccountMatcher
from sms_pipeline.pipeline.preprocessor import Preprocessor
from sms_pipeline.utils.errors import ExtractionError
from sms_pipeline.utils.logging import get_logger
from sms_pipeline.utils.metrics import (
    messages_received,
    extractions_total,
    extraction_misses,
    extractor_timeouts,
    extraction_latency
)

logger = get_logger(__name__)


def _now_millis() -> int:
    return int(time.time() * 1000)


class ExtractionCoordinator:
    """
    Preprocessor -> extractor strategies in order -> account matcher.

    The coordinator keeps only read-only collaborators and is safe to call
    concurrently for independent messages. It never retries and never
    persists anything; retry and storage belong to the caller.
    """

    def __init__(
        self,
        preprocessor: Preprocessor,
        extractors: Sequence[ExtractorStrategy],
        account_matcher: AccountMatcher,
        clock: Callable[[], int] = _now_millis,
        max_workers: int = 4
    ):
        self.preprocessor = preprocessor
        self.extractors: List[ExtractorStrategy] = list(extractors)
        self.account_matcher = account_matcher
        self.clock = clock
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="extractor")

    def process(self, body: str, sender_address: str, received_at: int) -> Optional[ExtractionOutcome]:
        """
        Turn one SMS into a reconciled transaction.

        Args:
            body: Raw SMS text
            sender_address: Originating address
            received_at: Arrival time, epoch millis

        Returns:
            PENDING ExtractionOutcome, or None if the message was filtered
            or no extractor found a positive amount
        """
        messages_received.inc()

        if not self.preprocessor.should_process(body, sender_address):
            return None

        candidate = self._extract(body, sender_address, received_at)
        if candidate is None:
            logger.debug("No extractor produced a transaction", sender=sender_address)
            return None

        account = self.account_matcher.match(candidate.account_last_four, candidate.bank_hint)
        processed_at = self.clock()

        outcome = ExtractionOutcome.from_candidate(
            candidate,
            original_message=body,
            sender_address=sender_address,
            received_at=received_at,
            processed_at=processed_at,
            account_id=account.id if account else None
        )

        logger.info(
            "Transaction extracted",
            extractor=candidate.source,
            direction=outcome.direction.value,
            account_id=outcome.account_id
        )
        return outcome

    def _extract(self, body: str, sender_address: str, received_at: int) -> Optional[CandidateRecord]:
        for extractor in self.extractors:
            if not extractor.is_available():
                logger.debug(f"Extractor '{extractor.name}' unavailable, skipping")
                continue

            start_time = time.time()
            candidate = self._run(extractor, body, sender_address, received_at)
            extraction_latency.labels(extractor=extractor.name).observe(time.time() - start_time)

            if candidate is not None:
                extractions_total.labels(extractor=extractor.name).inc()
                return candidate

            extraction_misses.labels(extractor=extractor.name).inc()
            logger.debug(f"Extractor '{extractor.name}' returned nothing, trying next tier")

        return None

    def _run(
        self,
        extractor: ExtractorStrategy,
        body: str,
        sender_address: str,
        received_at: int
    ) -> Optional[CandidateRecord]:
        try:
            if not extractor.timeout_seconds:
                return extractor.extract(body, sender_address, received_at)

            future = self._executor.submit(extractor.extract, body, sender_address, received_at)
            try:
                return future.result(timeout=extractor.timeout_seconds)
            except FutureTimeoutError:
                future.cancel()
                extractor_timeouts.labels(extractor=extractor.name).inc()
                logger.warning(
                    f"Extractor '{extractor.name}' timed out",
                    timeout_seconds=extractor.timeout_seconds
                )
                return None

        except Exception as e:
            raise ExtractionError(f"Extractor '{extractor.name}' failed: {e}") from e

    def get_processing_status(self) -> ProcessingStatus:
        """Availability of the cloud and pattern tiers"""
        return ProcessingStatus(
            cloud_available=any(e.name == "cloud" and e.is_available() for e in self.extractors),
            pattern_fallback_available=any(e.name == "pattern" for e in self.extractors)
        )

    def close(self) -> None:
        self._executor.shutdown(wait=False)
