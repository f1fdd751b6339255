"""Deterministic regex/keyword extractor for bank SMS"""

import re
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional
from sms_pipeline.constants import TransactionDirection
from sms_pipeline.extractors.base import ExtractorStrategy
from sms_pipeline.extractors.patterns import PatternTables, default_pattern_tables
from sms_pipeline.models.candidate import CandidateRecord
from sms_pipeline.utils.logging import get_logger

logger = get_logger(__name__)

_WHITESPACE = re.compile(r"\s+")
_LETTER = re.compile(r"[a-z]", re.IGNORECASE)


class PatternExtractor(ExtractorStrategy):
    """
    Extracts a candidate record from message text with ordered regex lists.

    Two stages: a transaction-likelihood gate, then independent best-effort
    field extraction. Only the amount is mandatory. The extractor never reads
    the clock, so identical text always yields an identical record.

    Callers must run the Preprocessor first; OTP content is not re-checked here.
    """

    name = "pattern"

    def __init__(self, tables: Optional[PatternTables] = None):
        self.tables = tables or default_pattern_tables()

    def extract(
        self,
        body: str,
        sender_address: Optional[str] = None,
        received_at: Optional[int] = None
    ) -> Optional[CandidateRecord]:
        message = _WHITESPACE.sub(" ", body or "").strip()
        if not message:
            return None

        if not self.is_transaction_message(message):
            logger.debug("Pattern gate rejected message")
            return None

        amount = self.extract_amount(message)
        if amount is None:
            logger.debug("No positive amount found")
            return None

        direction = self.determine_direction(message)
        merchant_name = self.extract_merchant_name(message)

        return CandidateRecord(
            amount=amount,
            direction=direction,
            merchant_name=merchant_name,
            bank_hint=self.extract_bank_hint(message),
            account_last_four=self.extract_account_tail(message),
            balance_after=self.extract_balance(message),
            transaction_reference=self.extract_reference(message),
            transaction_date_hint=self.extract_date_hint(message),
            description=self.describe(message, direction, merchant_name),
            source=self.name
        )

    # Stage 1: transaction-likelihood gate

    def is_transaction_message(self, message: str) -> bool:
        """(strong keyword AND amount) OR (bank pattern AND amount)"""
        lowered = message.lower()

        has_amount = any(p.search(message) for p in self.tables.amount_patterns)
        if not has_amount:
            return False

        has_strong_keyword = any(k in lowered for k in self.tables.strong_keywords)
        has_bank_pattern = any(p.search(message) for p in self.tables.bank_patterns)
        return has_strong_keyword or has_bank_pattern

    # Stage 2: field extraction

    def extract_amount(self, message: str) -> Optional[Decimal]:
        """First amount pattern wins; a failed or non-positive parse fails the message"""
        for pattern in self.tables.amount_patterns:
            match = pattern.search(message)
            if match:
                amount = _parse_decimal(match.group(1))
                if amount is None or amount <= 0:
                    return None
                return amount
        return None

    def determine_direction(self, message: str) -> TransactionDirection:
        """Credit only on a strictly higher keyword count; ties go to debit"""
        lowered = message.lower()
        debit_score = sum(lowered.count(k) for k in self.tables.debit_keywords)
        credit_score = sum(lowered.count(k) for k in self.tables.credit_keywords)

        if credit_score > debit_score:
            return TransactionDirection.CREDIT
        return TransactionDirection.DEBIT

    def extract_bank_hint(self, message: str) -> Optional[str]:
        for pattern in self.tables.bank_hint_patterns:
            match = pattern.search(message)
            if match:
                hint = _WHITESPACE.sub(" ", match.group(1)).strip()
                if hint.lower() in self.tables.bank_codes:
                    return hint.upper()
                return hint
        return None

    def extract_account_tail(self, message: str) -> Optional[str]:
        """Last four digits of a masked account or card number"""
        for pattern in self.tables.account_tail_patterns:
            match = pattern.search(message)
            if match:
                digits = re.sub(r"\D", "", match.group(1))
                if len(digits) >= 4:
                    return digits[-4:]
        return None

    def extract_balance(self, message: str) -> Optional[Decimal]:
        for pattern in self.tables.balance_patterns:
            match = pattern.search(message)
            if match:
                return _parse_decimal(match.group(1))
        return None

    def extract_reference(self, message: str) -> Optional[str]:
        for pattern in self.tables.reference_patterns:
            match = pattern.search(message)
            if match:
                return match.group(1)
        return None

    def extract_merchant_name(self, message: str) -> Optional[str]:
        """
        Try each merchant pattern once, in order.

        A match containing bank, card or payment-rail words is discarded and
        the next pattern is tried.
        """
        for pattern in self.tables.merchant_patterns:
            match = pattern.search(message)
            if not match:
                continue
            merchant = _WHITESPACE.sub(" ", match.group(1)).strip()
            if not merchant or not _LETTER.search(merchant):
                continue
            if self.tables.non_merchant.search(merchant):
                continue
            return merchant
        return None

    def extract_date_hint(self, message: str) -> Optional[int]:
        """Date mentioned in the text as epoch millis at UTC midnight"""
        for pattern in self.tables.date_patterns:
            match = pattern.search(message)
            if match:
                return self._parse_date(match.group(1))
        return None

    def _parse_date(self, text: str) -> Optional[int]:
        for fmt in self.tables.date_formats:
            try:
                parsed = datetime.strptime(text, fmt)
            except ValueError:
                continue
            return int(parsed.replace(tzinfo=timezone.utc).timestamp()) * 1000
        return None

    def describe(
        self,
        message: str,
        direction: TransactionDirection,
        merchant_name: Optional[str]
    ) -> str:
        """Display description: merchant, else a context label, else a generic label"""
        if merchant_name:
            return merchant_name

        lowered = message.lower()
        is_debit = direction == TransactionDirection.DEBIT
        if "atm" in lowered:
            return "ATM Withdrawal" if is_debit else "ATM Deposit"
        if "transfer" in lowered:
            return "Bank Transfer"
        if "upi" in lowered:
            return "UPI Payment" if is_debit else "UPI Receipt"
        return "Debit transaction" if is_debit else "Credit transaction"


def _parse_decimal(text: str) -> Optional[Decimal]:
    """Parse '12,34,567.50' style numbers; None when unparseable"""
    cleaned = text.replace(",", "").rstrip(".")
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return None
