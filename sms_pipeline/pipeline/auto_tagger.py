"""Caller-side rule that auto-categorizes small transactions"""

import time
from decimal import Decimal
from sms_pipeline.constants import LOW_VALUE_THRESHOLD, TransactionCategory, TransactionStatus
from sms_pipeline.models.outcome import ExtractionOutcome
from sms_pipeline.utils.metrics import low_value_tagged


def apply_low_value_rule(
    outcome: ExtractionOutcome,
    threshold: Decimal = LOW_VALUE_THRESHOLD,
    category: str = TransactionCategory.LOW_VALUE
) -> ExtractionOutcome:
    """
    Tag a pending transaction below `threshold` so it skips user review.

    Returns a new outcome; anything at or above the threshold, or not PENDING,
    is returned unchanged.
    """
    if outcome.status != TransactionStatus.PENDING or outcome.amount >= Decimal(threshold):
        return outcome

    low_value_tagged.inc()
    return outcome.model_copy(update={
        "status": TransactionStatus.TAGGED,
        "category": category,
        "is_tagged": True,
        "last_modified_at": max(int(time.time() * 1000), outcome.last_modified_at)
    })
