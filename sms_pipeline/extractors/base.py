"""Common interface for extractor tiers"""

from abc import ABC, abstractmethod
from typing import Optional
from sms_pipeline.models.candidate import CandidateRecord


class ExtractorStrategy(ABC):
    """
    One tier of the extraction chain.

    The coordinator tries available strategies in order and keeps the first
    non-null candidate. A strategy with ``timeout_seconds`` set is run on a
    worker thread and abandoned when the timeout elapses.
    """

    name: str = "extractor"
    timeout_seconds: Optional[float] = None

    def is_available(self) -> bool:
        return True

    @abstractmethod
    def extract(
        self,
        body: str,
        sender_address: Optional[str] = None,
        received_at: Optional[int] = None
    ) -> Optional[CandidateRecord]:
        """Return a candidate record, or None when nothing could be extracted"""
