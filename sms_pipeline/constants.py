"""Constants and enums for the SMS transaction pipeline"""

from decimal import Decimal
from enum import Enum


class TransactionDirection(str, Enum):
    """Money flow relative to the account holder"""
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"


class TransactionStatus(str, Enum):
    """Lifecycle of a reconciled transaction"""
    PENDING = "PENDING"    # untagged, needs user action
    TAGGED = "TAGGED"
    IGNORED = "IGNORED"
    DELETED = "DELETED"


class AccountType(str, Enum):
    """Kinds of accounts held in the registry"""
    SAVINGS = "SAVINGS"
    CURRENT = "CURRENT"
    CREDIT_CARD = "CREDIT_CARD"
    DEBIT_CARD = "DEBIT_CARD"
    UPI = "UPI"
    WALLET = "WALLET"
    OTHER = "OTHER"


class WorkStatus(str, Enum):
    """Result of handling one inbound message in the worker"""
    STORED = "stored"
    SKIPPED = "skipped"
    DUPLICATE = "duplicate"


class TransactionCategory:
    """Category labels assigned by the pipeline itself"""
    LOW_VALUE = "Low Value"  # reserved for the auto-tagger


# Auto-tagging
LOW_VALUE_THRESHOLD = Decimal("100")

# Cloud extractor defaults
DEFAULT_CLOUD_MODEL = "google/gemini-2.0-flash-001"
DEFAULT_CLOUD_BASE_URL = "https://openrouter.ai/api/v1"
CLOUD_TIMEOUT_SECONDS = 15

# Sender used for messages that arrive without an address
UNKNOWN_SENDER = "Unknown"
