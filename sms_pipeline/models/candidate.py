"""Candidate record produced by an extractor"""

from decimal import Decimal
from pydantic import BaseModel, Field
from typing import Optional
from sms_pipeline.constants import TransactionDirection


class CandidateRecord(BaseModel):
    """Unreconciled, extractor-produced guess at a message's transaction fields"""

    amount: Decimal = Field(..., gt=0, description="Transaction amount in account currency")
    direction: TransactionDirection = Field(..., description="DEBIT or CREDIT")
    merchant_name: Optional[str] = Field(None, description="Merchant / counterparty name")
    bank_hint: Optional[str] = Field(None, description="Loose bank name found in the text")
    account_last_four: Optional[str] = Field(
        None, pattern=r"^\d{4}$", description="Last four digits of the account or card"
    )
    balance_after: Optional[Decimal] = Field(None, description="Balance reported after the transaction")
    transaction_reference: Optional[str] = Field(None, description="Txn ID / UTR / reference number")
    transaction_date_hint: Optional[int] = Field(
        None, description="Date mentioned in the text, epoch millis (UTC midnight)"
    )
    description: str = Field(..., description="Synthesized display description")
    source: str = Field("pattern", description="Extractor tier that produced this record")

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "amount": "500.00",
                "direction": "DEBIT",
                "merchant_name": "AMAZON",
                "bank_hint": None,
                "account_last_four": "1234",
                "balance_after": "5000.00",
                "transaction_reference": "123456789",
                "transaction_date_hint": 1705276800000,
                "description": "AMAZON",
                "source": "pattern"
            }
        }
