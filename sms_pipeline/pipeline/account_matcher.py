"""Resolve loose bank/account hints from a message to a known account"""

from typing import List, Optional
from sms_pipeline.models.account import Account
from sms_pipeline.utils.logging import get_logger
from sms_pipeline.utils.metrics import accounts_matched

logger = get_logger(__name__)


class AccountMatcher:
    """
    Read-only lookup against the account registry.

    Precedence:
    1. Tail digits. One match wins. Several matches are narrowed by the bank
       hint when given; if narrowing leaves nothing, the first digit match is
       used. Without a hint the first registered match is used.
    2. Bank hint alone: first account whose institution name contains it.
    3. Nothing.
    """

    def __init__(self, registry):
        self.registry = registry

    def match(self, account_tail_digits: Optional[str], bank_hint: Optional[str]) -> Optional[Account]:
        tail = (account_tail_digits or "").strip()
        hint = (bank_hint or "").strip()

        if tail:
            by_digits = self.registry.find_by_tail_digits(tail)
            logger.debug(f"Found {len(by_digits)} accounts matching tail digits", tail=tail)

            if len(by_digits) == 1:
                return self._matched(by_digits[0], "tail_single")

            if len(by_digits) > 1:
                if hint:
                    narrowed = _filter_by_institution(by_digits, hint)
                    if narrowed:
                        return self._matched(narrowed[0], "tail_hint")
                    logger.debug("Bank hint did not narrow tail matches, using first", bank_hint=hint)
                return self._matched(by_digits[0], "tail_first")

        if hint:
            by_bank = self.registry.find_by_institution_name(hint)
            if by_bank:
                return self._matched(by_bank[0], "bank_hint")

        accounts_matched.labels(rule="none").inc()
        logger.debug("No matching account found")
        return None

    def _matched(self, account: Account, rule: str) -> Account:
        accounts_matched.labels(rule=rule).inc()
        logger.debug("Account matched", account_id=account.id, rule=rule)
        return account


def _filter_by_institution(accounts: List[Account], hint: str) -> List[Account]:
    needle = hint.lower()
    return [a for a in accounts if needle in a.institution_name.lower()]
