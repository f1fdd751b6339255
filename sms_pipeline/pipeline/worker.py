"""Per-message worker: the caller side of the extraction pipeline.

One worker call handles one inbound SMS end to end: dedup check, coordinator,
legacy keyword account lookup, low-value auto-tagging, insert, notify. The
insert is the last fallible step, so a failure never leaves a partially
stored transaction behind and the message can be retried as-is.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, List, Optional
from sms_pipeline.constants import LOW_VALUE_THRESHOLD, TransactionCategory, WorkStatus
from sms_pipeline.models.message import RawMessage
from sms_pipeline.models.outcome import ExtractionOutcome
from sms_pipeline.pipeline.auto_tagger import apply_low_value_rule
from sms_pipeline.pipeline.coordinator import ExtractionCoordinator
from sms_pipeline.utils.errors import DuplicateTransactionError, RetryableProcessingError
from sms_pipeline.utils.logging import get_logger
from sms_pipeline.utils.metrics import worker_results, accounts_matched

logger = get_logger(__name__)

# Called with (transaction_id, outcome) after a successful insert
TransactionListener = Callable[[str, ExtractionOutcome], None]


@dataclass(frozen=True)
class WorkResult:
    """What happened to one message"""
    status: WorkStatus
    transaction_id: Optional[str] = None
    outcome: Optional[ExtractionOutcome] = None


class TransactionWorker:
    """Runs the coordinator for one message and persists the result"""

    def __init__(
        self,
        coordinator: ExtractionCoordinator,
        store,
        registry=None,
        low_value_threshold: Decimal = LOW_VALUE_THRESHOLD,
        low_value_category: str = TransactionCategory.LOW_VALUE,
        listeners: Optional[List[TransactionListener]] = None
    ):
        self.coordinator = coordinator
        self.store = store
        self.registry = registry
        self.low_value_threshold = Decimal(str(low_value_threshold))
        self.low_value_category = low_value_category
        self.listeners: List[TransactionListener] = list(listeners or [])

    def handle(self, message: RawMessage) -> WorkResult:
        """
        Process and store one message.

        Returns:
            WorkResult with STORED, SKIPPED (not a transaction) or DUPLICATE

        Raises:
            RetryableProcessingError: If anything failed; nothing was stored
        """
        try:
            if self.store.exists(message.body):
                worker_results.labels(status=WorkStatus.DUPLICATE.value).inc()
                logger.info("Message already stored, skipping", sender=message.sender_address)
                return WorkResult(status=WorkStatus.DUPLICATE)

            outcome = self.coordinator.process(message.body, message.sender_address, message.received_at)
            if outcome is None:
                worker_results.labels(status=WorkStatus.SKIPPED.value).inc()
                logger.debug("SMS does not contain transaction information", sender=message.sender_address)
                return WorkResult(status=WorkStatus.SKIPPED)

            outcome = self._resolve_account_by_keyword(outcome)
            outcome = apply_low_value_rule(
                outcome, threshold=self.low_value_threshold, category=self.low_value_category
            )

            try:
                transaction_id = self.store.insert(outcome)
            except DuplicateTransactionError:
                # Another worker stored the same SMS between the check and the insert
                worker_results.labels(status=WorkStatus.DUPLICATE.value).inc()
                return WorkResult(status=WorkStatus.DUPLICATE, outcome=outcome)

        except Exception as e:
            worker_results.labels(status="retry").inc()
            logger.error(f"Error processing SMS: {e}", sender=message.sender_address)
            raise RetryableProcessingError(f"Processing failed for message from {message.sender_address}: {e}") from e

        worker_results.labels(status=WorkStatus.STORED.value).inc()
        logger.info("Transaction saved", transaction_id=transaction_id, status=outcome.status.value)
        self._notify(transaction_id, outcome)
        return WorkResult(status=WorkStatus.STORED, transaction_id=transaction_id, outcome=outcome)

    def _resolve_account_by_keyword(self, outcome: ExtractionOutcome) -> ExtractionOutcome:
        """Broad keyword search on the bank hint when the matcher found nothing"""
        if outcome.account_id is not None or self.registry is None or not outcome.bank_hint:
            return outcome

        candidates = self.registry.search_by_keyword(outcome.bank_hint)
        if not candidates:
            return outcome

        accounts_matched.labels(rule="keyword").inc()
        logger.debug("Keyword search matched account", account_id=candidates[0].id)
        return outcome.model_copy(update={"account_id": candidates[0].id})

    def _notify(self, transaction_id: str, outcome: ExtractionOutcome) -> None:
        # The transaction is already stored; a failing listener must not trigger a retry
        for listener in self.listeners:
            try:
                listener(transaction_id, outcome)
            except Exception as e:
                logger.error(f"New-transaction listener failed: {e}", transaction_id=transaction_id)
