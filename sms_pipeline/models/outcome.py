"""Reconciled transaction model and pipeline status"""

from decimal import Decimal
from pydantic import BaseModel, Field
from typing import Optional
from sms_pipeline.constants import TransactionDirection, TransactionStatus
from sms_pipeline.models.candidate import CandidateRecord


class ExtractionOutcome(BaseModel):
    """Final reconciled transaction handed to the persistence collaborator"""

    amount: Decimal = Field(..., gt=0, description="Transaction amount")
    direction: TransactionDirection = Field(..., description="DEBIT or CREDIT")
    description: str = Field(..., description="Display description")
    merchant_name: Optional[str] = Field(None, description="Merchant / counterparty name")
    bank_hint: Optional[str] = Field(None, description="Bank name extracted from the message")
    account_last_four: Optional[str] = Field(None, description="Last four digits from the message")
    balance_after: Optional[Decimal] = Field(None, description="Balance after the transaction")
    transaction_reference: Optional[str] = Field(None, description="Txn ID / UTR / reference")
    transaction_date_hint: Optional[int] = Field(None, description="Date from the SMS text, epoch millis")
    extractor: str = Field(..., description="Extractor tier that produced the candidate")

    account_id: Optional[str] = Field(None, description="Resolved registry account id")

    original_message: str = Field(..., description="Raw SMS body; natural dedup key")
    sender_address: str = Field(..., description="Originating SMS address")
    received_at: int = Field(..., description="SMS arrival time, epoch millis")
    extracted_at: int = Field(..., description="When the pipeline processed the SMS, epoch millis")
    last_modified_at: int = Field(..., description="Last update, epoch millis")

    status: TransactionStatus = Field(TransactionStatus.PENDING, description="Lifecycle status")
    category: Optional[str] = Field(None, description="Assigned category, if tagged")
    is_tagged: bool = Field(False, description="Whether a category has been assigned")

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "amount": "500.00",
                "direction": "DEBIT",
                "description": "AMAZON",
                "merchant_name": "AMAZON",
                "account_last_four": "1234",
                "balance_after": "5000.00",
                "transaction_reference": "123456789",
                "extractor": "pattern",
                "account_id": "acc_1",
                "original_message": "Your account XXXX1234 has been debited with Rs.500.00 ...",
                "sender_address": "VM-HDFCBK",
                "received_at": 1705312800000,
                "extracted_at": 1705312801000,
                "last_modified_at": 1705312801000,
                "status": "PENDING"
            }
        }

    @classmethod
    def from_candidate(
        cls,
        candidate: CandidateRecord,
        original_message: str,
        sender_address: str,
        received_at: int,
        processed_at: int,
        account_id: Optional[str] = None
    ) -> "ExtractionOutcome":
        """Build a PENDING outcome from a candidate record"""
        return cls(
            amount=candidate.amount,
            direction=candidate.direction,
            description=candidate.description,
            merchant_name=candidate.merchant_name,
            bank_hint=candidate.bank_hint,
            account_last_four=candidate.account_last_four,
            balance_after=candidate.balance_after,
            transaction_reference=candidate.transaction_reference,
            transaction_date_hint=candidate.transaction_date_hint,
            extractor=candidate.source,
            account_id=account_id,
            original_message=original_message,
            sender_address=sender_address,
            received_at=received_at,
            extracted_at=processed_at,
            last_modified_at=processed_at,
            status=TransactionStatus.PENDING
        )


class ProcessingStatus(BaseModel):
    """Coarse availability of the extraction tiers"""

    cloud_available: bool = Field(..., description="Cloud extractor initialized")
    pattern_fallback_available: bool = Field(True, description="Pattern extractor present")
