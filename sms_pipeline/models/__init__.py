"""Data models for the SMS transaction pipeline"""

from .message import RawMessage
from .candidate import CandidateRecord
from .account import Account
from .outcome import ExtractionOutcome, ProcessingStatus

__all__ = ["RawMessage", "CandidateRecord", "Account", "ExtractionOutcome", "ProcessingStatus"]
