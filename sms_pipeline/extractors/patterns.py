"""Keyword and regex tables used by the pattern extractor.

Tables are immutable: build them once with ``default_pattern_tables()`` (or a
custom ``PatternTables``) and share the value between extractor instances.
Every regex is compiled case-insensitive and is tried in list order; the first
pattern that matches wins.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Pattern, Tuple

# Currency marker and a number with optional thousands separators
CURRENCY = r"(?:\brs\.?|₹|\binr)"
NUMBER = r"(\d[\d,]*(?:\.\d{1,2})?)"

BANK_CODES = (
    "hdfc", "icici", "sbi", "axis", "kotak", "pnb", "bob", "canara",
    "idfc", "indusind", "federal", "union", "indian", "yes",
)
# Codes that are ordinary English words are only trusted when followed by "bank"
_BARE_BANK_CODES = "hdfc|icici|sbi|axis|kotak|pnb|bob|canara|idfc|indusind"

STRONG_KEYWORDS = (
    "debited", "credited", "withdrawn", "deposited", "spent", "payment received",
    "txn", "transaction", "upi", "atm", "available balance", "a/c no", "account",
    "card ending", "deducted from", "received towards", "inb txn",
)

DEBIT_KEYWORDS = (
    "debited", "withdrawn", "spent", "purchase", "payment", "paid", "debit",
    "emi", "bill", "transferred", "sent", "atm withdrawal",
)

CREDIT_KEYWORDS = (
    "credited", "deposited", "received", "refund", "cashback", "salary",
    "credit", "deposit", "interest", "bonus", "reimbursement",
)

# Tokens that mean a "merchant" match actually captured bank, rail or currency wording
NON_MERCHANT_PATTERN = (
    r"\b(?:bank|card|account|a/c|via|upi|paytm|gpay|phonepe|wallet|inb|neft|imps|rtgs|txn|rs|inr)\b"
)

BANK_PATTERNS = (
    r"\b(?:hdfc|sbi|icici|axis|kotak|pnb|bob|canara|union|indian)\s*bank",
    r"\ba/c\s*no\.?\s*[0-9x]+",
    r"\bcard\s*(?:ending|no\.?)\s*[0-9x]+",
    r"\bavailable\s*(?:balance|limit)",
    r"\bref\s*:?\s*[a-z0-9]+",
    r"\btxn\s*(?:id|ref)",
)

AMOUNT_PATTERNS = (
    # Rs.325.00, ₹1,000, INR 500
    CURRENCY + r"\s*" + NUMBER,
    # 500 INR, 1,200.50 Rs
    r"(?<![\w.,])" + NUMBER + r"\s*(?:rs\b\.?|₹|inr\b)",
    # deducted Rs.325, spent 369
    r"\b(?:deducted|spent|paid|received|credited|debited)\s*" + CURRENCY + r"?\s*" + NUMBER,
    # payment of Rs.13471, txn: INR 20
    r"\b(?:payment|amount|txn)\s*(?:of|:)?\s*" + CURRENCY + r"\s*" + NUMBER,
    # balance is Rs.5000
    r"\b(?:balance|limit)\s*(?:is)?\s*" + CURRENCY + r"\s*" + NUMBER,
)

BANK_HINT_PATTERNS = (
    r"\b(hdfc|icici|sbi|axis|kotak|pnb|bob|canara|idfc|indusind|federal|union|indian|yes)\s*bank\b",
    r"\b(" + _BARE_BANK_CODES + r")(?:bk|bank)?\b",
    r"\b(?:from|by|at)\s+([a-z][a-z\s]*?\s+bank)\b",
)

ACCOUNT_TAIL_PATTERNS = (
    r"\b(?:a/c|acct|account)\s*(?:no\.?|number)?\s*:?\s*([x*\d]*\d{4})\b",
    r"\bcard\s*(?:ending|no\.?)?\s*(?:with|in)?\s*:?\s*([x*\d]*\d{4})\b",
    r"(?:\bx{2,}|\*{2,})(\d{4})\b",
    r"\bending\s+(?:in\s+|with\s+)?(\d{4})\b",
)

BALANCE_PATTERNS = (
    r"\b(?:avl|available)\.?\s*(?:bal|balance)\.?\s*(?:is)?\s*:?\s*" + CURRENCY + r"?\s*" + NUMBER,
    r"\bbal(?:ance)?\.?\s*(?:is)?\s*:?\s*" + CURRENCY + r"?\s*" + NUMBER,
)

# A reference must contain at least one digit ("txn of Rs" is not a reference)
_REFERENCE = r"([a-z0-9]*\d[a-z0-9]*)\b"

REFERENCE_PATTERNS = (
    r"\b(?:txn|trxn|transaction|ref(?:erence)?)\.?\s*(?:id|no|number|ref)?\.?\s*:?\s*" + _REFERENCE,
    r"\butr\s*(?:no\.?)?\s*:?\s*" + _REFERENCE,
)

_MERCHANT = r"([a-z0-9&'][a-z0-9&'\s]*?)"
_MERCHANT_END = r"(?=\s+(?:on|via|using|with|avl|bal|ref|txn|upi)\b|\s*[.,;:!-]|$)"

MERCHANT_PATTERNS = (
    r"\bfor\s+" + _MERCHANT + _MERCHANT_END,
    r"\bat\s+" + _MERCHANT + _MERCHANT_END,
    r"\b(?:to|from)\s+" + _MERCHANT + _MERCHANT_END,
    r"\bmerchant\s*:?\s*" + _MERCHANT + _MERCHANT_END,
    r"\btowards\s+" + _MERCHANT + _MERCHANT_END,
)

DATE_PATTERNS = (
    r"(?<!\d)(\d{4}-\d{2}-\d{2})(?!\d)",                     # 2025-08-18
    r"(?<!\d)(\d{1,2}[-/][a-z]{3}[-/]\d{2,4})(?!\d)",        # 15-Jan-24
    r"(?<!\d)(\d{1,2}[-/]\d{1,2}[-/]\d{2,4})(?!\d)",         # 8-8-2025, 20/08/25
    r"(?<!\w)(\d{1,2}[a-z]{3}\d{2,4})(?!\d)",                # 20Aug25
)

DATE_FORMATS = (
    "%Y-%m-%d",
    "%d-%b-%y",
    "%d-%b-%Y",
    "%d/%b/%y",
    "%d/%b/%Y",
    "%d-%m-%y",
    "%d-%m-%Y",
    "%d/%m/%y",
    "%d/%m/%Y",
    "%d%b%y",
    "%d%b%Y",
)


def _compile(patterns: Tuple[str, ...]) -> Tuple[Pattern, ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


@dataclass(frozen=True)
class PatternTables:
    """Compiled keyword and regex tables for the pattern extractor"""

    strong_keywords: Tuple[str, ...]
    debit_keywords: Tuple[str, ...]
    credit_keywords: Tuple[str, ...]
    bank_codes: Tuple[str, ...]
    non_merchant: Pattern
    bank_patterns: Tuple[Pattern, ...]
    amount_patterns: Tuple[Pattern, ...]
    bank_hint_patterns: Tuple[Pattern, ...]
    account_tail_patterns: Tuple[Pattern, ...]
    balance_patterns: Tuple[Pattern, ...]
    reference_patterns: Tuple[Pattern, ...]
    merchant_patterns: Tuple[Pattern, ...]
    date_patterns: Tuple[Pattern, ...]
    date_formats: Tuple[str, ...]


@lru_cache(maxsize=1)
def default_pattern_tables() -> PatternTables:
    """Build (once) the default tables for Indian bank SMS in English"""
    return PatternTables(
        strong_keywords=STRONG_KEYWORDS,
        debit_keywords=DEBIT_KEYWORDS,
        credit_keywords=CREDIT_KEYWORDS,
        bank_codes=BANK_CODES,
        non_merchant=re.compile(NON_MERCHANT_PATTERN, re.IGNORECASE),
        bank_patterns=_compile(BANK_PATTERNS),
        amount_patterns=_compile(AMOUNT_PATTERNS),
        bank_hint_patterns=_compile(BANK_HINT_PATTERNS),
        account_tail_patterns=_compile(ACCOUNT_TAIL_PATTERNS),
        balance_patterns=_compile(BALANCE_PATTERNS),
        reference_patterns=_compile(REFERENCE_PATTERNS),
        merchant_patterns=_compile(MERCHANT_PATTERNS),
        date_patterns=_compile(DATE_PATTERNS),
        date_formats=DATE_FORMATS,
    )
