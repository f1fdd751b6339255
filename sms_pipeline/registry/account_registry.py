"""In-process account registry implementing the read API used by the matcher"""

from typing import Any, Dict, Iterable, List, Optional
from sms_pipeline.constants import AccountType
from sms_pipeline.models.account import Account
from sms_pipeline.utils.errors import ConfigurationError
from sms_pipeline.utils.logging import get_logger

logger = get_logger(__name__)


class AccountRegistry:
    """
    Ordered collection of known accounts.

    Registration order is preserved and is the tie-break order for every
    lookup. Inactive accounts are stored but never returned.
    """

    def __init__(self, accounts: Optional[Iterable[Account]] = None):
        self._accounts: List[Account] = []
        for account in accounts or ():
            self.register(account)

    @classmethod
    def from_config(cls, entries: List[Dict[str, Any]]) -> "AccountRegistry":
        """
        Build a registry from the `accounts:` section of the pipeline config

        Raises:
            ConfigurationError: If an entry is missing required fields
        """
        accounts = []
        for index, entry in enumerate(entries or []):
            try:
                accounts.append(Account(
                    id=str(entry["id"]),
                    display_name=entry["display_name"],
                    institution_name=entry["institution_name"],
                    account_number_tail=(
                        str(entry["account_number_tail"]) if entry.get("account_number_tail") else None
                    ),
                    account_type=AccountType(entry.get("account_type", AccountType.SAVINGS.value)),
                    is_active=entry.get("is_active", True),
                    match_keywords=frozenset(k.lower() for k in entry.get("match_keywords", []))
                ))
            except (KeyError, ValueError) as e:
                raise ConfigurationError(f"Invalid account entry #{index}: {e}")

        logger.info(f"Loaded {len(accounts)} accounts from configuration")
        return cls(accounts)

    def register(self, account: Account) -> None:
        if any(existing.id == account.id for existing in self._accounts):
            raise ValueError(f"Duplicate account id: {account.id}")
        self._accounts.append(account)

    def list_active_accounts(self) -> List[Account]:
        return [a for a in self._accounts if a.is_active]

    def find_by_tail_digits(self, tail: str) -> List[Account]:
        """Active accounts whose stored number ends with the given digits"""
        if not tail:
            return []
        return [
            a for a in self.list_active_accounts()
            if a.account_number_tail and a.account_number_tail.strip().endswith(tail)
        ]

    def find_by_institution_name(self, name: str) -> List[Account]:
        """Active accounts whose institution name contains `name` (case-insensitive)"""
        if not name:
            return []
        needle = name.strip().lower()
        return [a for a in self.list_active_accounts() if needle in a.institution_name.lower()]

    def search_by_keyword(self, term: str) -> List[Account]:
        """
        Broad search over institution, display name, account number and keywords.

        Results are ranked institution > display name > account number > keyword,
        then by registration order.
        """
        if not term or not term.strip():
            return []
        needle = term.strip().lower()

        ranked = []
        for position, account in enumerate(self.list_active_accounts()):
            if needle in account.institution_name.lower():
                rank = 1
            elif needle in account.display_name.lower():
                rank = 2
            elif account.account_number_tail and needle in account.account_number_tail.lower():
                rank = 3
            elif any(needle in keyword or keyword in needle for keyword in account.match_keywords):
                rank = 4
            else:
                continue
            ranked.append((rank, position, account))

        return [account for _, _, account in sorted(ranked, key=lambda item: item[:2])]
