"""Inbound SMS message model"""

from pydantic import BaseModel, Field
from sms_pipeline.constants import UNKNOWN_SENDER


class RawMessage(BaseModel):
    """One inbound SMS event, as delivered by the receiver"""

    body: str = Field(..., description="Full message text")
    sender_address: str = Field(UNKNOWN_SENDER, description="Originating address, e.g. VM-HDFCBK")
    received_at: int = Field(..., description="Arrival time in epoch milliseconds")

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "body": "Rs.2000 credited to your SBI account XXXX5678 on 15-Jan-24. Ref: SAL123456",
                "sender_address": "AD-SBIINB",
                "received_at": 1705312800000
            }
        }
