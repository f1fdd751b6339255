"""Cloud language-model extractor.

Sends an already-preprocessed SMS to an OpenAI-compatible chat endpoint with a
fixed prompt and maps the JSON answer onto a CandidateRecord. Any failure
(transport, timeout, malformed JSON, "not a transaction", bad amount) collapses
to None so the coordinator can fall back to the pattern extractor.
"""

import json
import os
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional
from sms_pipeline.constants import (
    TransactionDirection,
    DEFAULT_CLOUD_MODEL,
    DEFAULT_CLOUD_BASE_URL,
    CLOUD_TIMEOUT_SECONDS
)
from sms_pipeline.extractors.base import ExtractorStrategy
from sms_pipeline.models.candidate import CandidateRecord
from sms_pipeline.tools.llm_client import create_client, call_llm
from sms_pipeline.utils.errors import LLMError
from sms_pipeline.utils.logging import get_logger
from sms_pipeline.utils.metrics import cloud_extractor_available

logger = get_logger(__name__)

EXTRACTION_PROMPT = """You are a transaction extraction expert. Analyze this SMS message and extract transaction information.

SMS Message: "{message}"

Rules:
1. Only extract COMPLETED transactions (past tense: debited, credited, withdrawn, deposited)
2. Ignore OTP messages, pending transactions, or future transactions
3. Return ONLY valid JSON, no explanations

Extract these fields if present:
{{
    "isTransaction": boolean (true only if this is a COMPLETED transaction),
    "amount": number (transaction amount, required if isTransaction is true),
    "type": string ("DEBIT" or "CREDIT"),
    "merchantName": string (merchant/vendor name, null if not found),
    "transactionId": string (transaction ID/reference, null if not found),
    "balance": number (account balance after transaction, null if not found),
    "bankInfo": string (bank name, null if not found),
    "accountLastFourDigits": string (last 4 digits of account/card number from patterns like "XXXX1203", "*1203", "ending in 1203" - extract only the 4 digits like "1203", null if not found)
}}

If this is NOT a completed transaction, return: {{"isTransaction": false}}

JSON Response:"""

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\s*```$")


class CloudExtractor(ExtractorStrategy):
    """LLM-backed extractor; availability is fixed at construction time"""

    name = "cloud"

    def __init__(
        self,
        client=None,
        model: str = DEFAULT_CLOUD_MODEL,
        timeout_seconds: float = CLOUD_TIMEOUT_SECONDS,
        enabled: bool = True,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        max_retries: int = 1
    ):
        self.model = model
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries
        self._client = None

        if not enabled:
            logger.info("Cloud extractor disabled by configuration")
        elif client is not None:
            self._client = client
        else:
            try:
                self._client = create_client(api_key=api_key, base_url=base_url or DEFAULT_CLOUD_BASE_URL)
                logger.info("Cloud extractor initialized", model=model)
            except LLMError as e:
                logger.warning(f"Cloud extractor unavailable for this session: {e}")

        cloud_extractor_available.set(1 if self._client is not None else 0)

    @classmethod
    def from_config(cls, cloud_config: Dict[str, Any], client=None) -> "CloudExtractor":
        """Build from the extraction.cloud section; CLOUD_LLM_MODEL overrides the model"""
        return cls(
            client=client,
            model=os.getenv("CLOUD_LLM_MODEL") or cloud_config.get("model", DEFAULT_CLOUD_MODEL),
            timeout_seconds=float(cloud_config.get("timeout_seconds", CLOUD_TIMEOUT_SECONDS)),
            enabled=bool(cloud_config.get("enabled", True)),
            base_url=cloud_config.get("base_url"),
            max_retries=int(cloud_config.get("max_retries", 1))
        )

    def is_available(self) -> bool:
        return self._client is not None

    def extract(
        self,
        body: str,
        sender_address: Optional[str] = None,
        received_at: Optional[int] = None
    ) -> Optional[CandidateRecord]:
        if not self.is_available():
            return None

        try:
            prompt = build_prompt(body)
            response = call_llm(
                self._client,
                prompt,
                model=self.model,
                timeout=self.timeout_seconds,
                max_retries=self.max_retries
            )
            candidate = parse_response(response, source=self.name)
            if candidate is None:
                logger.debug("Cloud extractor found no completed transaction", sender=sender_address)
            return candidate

        except Exception as e:
            logger.warning(f"Cloud extraction failed, falling back: {e}", sender=sender_address)
            return None


def build_prompt(message: str) -> str:
    """Fixed extraction prompt; the message is embedded verbatim"""
    return EXTRACTION_PROMPT.format(message=message.replace('"', "'"))


def strip_code_fences(text: str) -> str:
    """Remove ```json ... ``` wrapping that models add around JSON"""
    cleaned = (text or "").strip()
    cleaned = _FENCE_OPEN.sub("", cleaned)
    cleaned = _FENCE_CLOSE.sub("", cleaned)
    return cleaned.strip()


def parse_response(response: str, source: str = "cloud") -> Optional[CandidateRecord]:
    """
    Map the model's JSON answer onto a candidate record.

    Returns None for "not a transaction", a missing/invalid/non-positive amount,
    or a reply that is not a JSON object. JSON syntax errors propagate.
    """
    data = json.loads(strip_code_fences(response))
    if not isinstance(data, dict):
        return None

    if not _is_true(data.get("isTransaction")):
        return None

    amount = _to_decimal(data.get("amount"))
    if amount is None or amount <= 0:
        return None

    direction = (
        TransactionDirection.CREDIT
        if str(data.get("type") or "").strip().upper() == "CREDIT"
        else TransactionDirection.DEBIT
    )
    merchant_name = _clean_text(data.get("merchantName"))

    return CandidateRecord(
        amount=amount,
        direction=direction,
        merchant_name=merchant_name,
        bank_hint=_clean_text(data.get("bankInfo")),
        account_last_four=_last_four(data.get("accountLastFourDigits")),
        balance_after=_to_decimal(data.get("balance")),
        transaction_reference=_clean_text(data.get("transactionId")),
        transaction_date_hint=None,
        description=merchant_name or f"{direction.value.capitalize()} transaction",
        source=source
    )


def _is_true(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return isinstance(value, str) and value.strip().lower() == "true"


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.replace(",", "").strip()
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def _clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    if not text or text.lower() == "null":
        return None
    return text


def _last_four(value: Any) -> Optional[str]:
    text = _clean_text(value)
    if text is None:
        return None
    digits = re.sub(r"\D", "", text)
    return digits[-4:] if len(digits) >= 4 else None
