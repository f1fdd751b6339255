"""Privacy gate run before any extraction.

Messages carrying one-time codes, PINs, validity windows or pending/future
transaction wording are rejected outright so they never reach an extractor
(and in particular never leave the device through the cloud tier). Messages
with no transactional vocabulary at all are rejected as well.
"""

import re
from typing import Iterable, Optional, Tuple
from sms_pipeline.utils.logging import get_logger
from sms_pipeline.utils.metrics import messages_filtered

logger = get_logger(__name__)

SENSITIVE_KEYWORDS = (
    "otp", "one time password", "verification code", "auth code", "authentication",
    "valid till", "valid for", "expires in", "do not share", "don't share", "pin",
    "authorization", "verify", "confirm transaction", "transaction pending",
    "transaction initiated", "please confirm", "approval required",
    "enter otp", "use otp", "verify otp", "temporary password",
    "secure code", "access code", "login code", "passcode",
    "will be debited", "will be credited", "will be deducted", "will be charged",
    "has requested money", "on approving", "approve the request",
    "maintain balance", "ensure sufficient balance", "payment due",
    "mandate", "e-mandate", "auto-debit", "standing instruction",
    "scheduled for", "will be processed on",
)

TRANSACTION_VOCABULARY = (
    "debited", "credited", "withdrawn", "deposited", "spent", "payment",
    "txn", "transaction", "upi", "atm", "balance", "account", "card",
    "₹", "rs", "inr", "amount", "deducted", "received", "transferred",
)

OTP_PATTERNS = tuple(re.compile(p, re.IGNORECASE) for p in (
    r"\b\d{4,8}\b.*(?:otp|code|pin|password)",
    r"(?:otp|code|pin).*\b\d{4,8}\b",
    r"\b\d{4,8}\s*(?:is|for).*(?:verification|authentication|login)",
    r"(?:expires?|valid).*\d+.*(?:min|minutes|hrs|hours)",
))


class Preprocessor:
    """Pure classifier deciding whether a message may be extracted"""

    def __init__(self, extra_sensitive_keywords: Optional[Iterable[str]] = None):
        extra = tuple(k.lower() for k in (extra_sensitive_keywords or ()) if k and k.strip())
        self.sensitive_keywords: Tuple[str, ...] = SENSITIVE_KEYWORDS + extra
        self.transaction_vocabulary: Tuple[str, ...] = TRANSACTION_VOCABULARY
        self.otp_patterns = OTP_PATTERNS

    def should_process(self, body: str, sender_address: str) -> bool:
        """
        Check whether a message is safe and plausible to extract.

        Args:
            body: Raw SMS text
            sender_address: Originating address (used for logging only)

        Returns:
            True if the message may be passed to the extractors
        """
        reason = self.rejection_reason(body)
        if reason:
            messages_filtered.labels(reason=reason).inc()
            logger.debug("Message filtered by preprocessor", sender=sender_address, reason=reason)
            return False

        logger.debug("Message passed preprocessing", sender=sender_address)
        return True

    def rejection_reason(self, body: str) -> Optional[str]:
        """Name of the first rejecting signal, or None if the message passes"""
        lowered = (body or "").lower()

        if any(keyword in lowered for keyword in self.sensitive_keywords):
            return "sensitive_keyword"

        if any(pattern.search(body or "") for pattern in self.otp_patterns):
            return "otp_pattern"

        if not any(token in lowered for token in self.transaction_vocabulary):
            return "non_transactional"

        return None
