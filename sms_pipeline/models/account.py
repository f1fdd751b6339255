"""Known account model"""

from pydantic import BaseModel, Field
from typing import Optional, FrozenSet
from sms_pipeline.constants import AccountType


class Account(BaseModel):
    """Account owned by the external registry; the pipeline only reads it"""

    id: str = Field(..., description="Registry identifier")
    display_name: str = Field(..., description="User-facing account name")
    institution_name: str = Field(..., description="Bank or issuer name")
    account_number_tail: Optional[str] = Field(None, description="Stored (masked) account number or its tail")
    account_type: AccountType = Field(AccountType.SAVINGS, description="Kind of account")
    is_active: bool = Field(True, description="Inactive accounts are never matched")
    match_keywords: FrozenSet[str] = Field(
        default_factory=frozenset, description="Extra words identifying this account in SMS text"
    )

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "id": "acc_hdfc_savings",
                "display_name": "Primary Savings",
                "institution_name": "HDFC Bank",
                "account_number_tail": "0067",
                "account_type": "SAVINGS",
                "is_active": True,
                "match_keywords": ["salary", "primary"]
            }
        }
