"""Loader for exported SMS inbox CSV files - feeds the worker in batch runs"""

import os
import time
import pandas as pd
from pathlib import Path
from typing import Iterator, Optional
from sms_pipeline.constants import UNKNOWN_SENDER
from sms_pipeline.models.message import RawMessage
from sms_pipeline.utils.logging import get_logger

logger = get_logger(__name__)

REQUIRED_COLUMNS = ["body"]


class MessageCsvLoader:
    """
    Loads an SMS export with `body`, `address` and `date` columns.

    `date` may be epoch milliseconds or any string pandas can parse; rows
    without a usable date get the load time. Rows with an empty body are
    skipped.
    """

    def __init__(self, csv_path: Optional[str] = None):
        """
        Args:
            csv_path: CSV file (defaults to SMS_EXPORT_CSV)
        """
        if csv_path is None:
            csv_path = os.getenv("SMS_EXPORT_CSV", "sms_export.csv")

        self.csv_path = Path(csv_path)
        if not self.csv_path.exists():
            raise FileNotFoundError(f"SMS export not found: {csv_path}")

        self._messages = None

    @property
    def messages(self) -> pd.DataFrame:
        """Load and cache the export"""
        if self._messages is None:
            df = pd.read_csv(self.csv_path, dtype={"body": str, "address": str}, keep_default_na=False)
            missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
            if missing:
                raise ValueError(f"SMS export is missing columns: {missing}")
            logger.info(f"Loaded {len(df)} rows from {self.csv_path.name}")
            self._messages = df
        return self._messages

    def __iter__(self) -> Iterator[RawMessage]:
        return self.iter_messages()

    def iter_messages(self, limit: Optional[int] = None) -> Iterator[RawMessage]:
        """Yield one RawMessage per non-empty row, in file order"""
        df = self.messages
        if limit:
            df = df.head(limit)

        fallback_time = int(time.time() * 1000)
        skipped = 0
        for row in df.itertuples(index=False):
            body = str(getattr(row, "body", "") or "").strip()
            if not body:
                skipped += 1
                continue

            address = str(getattr(row, "address", "") or "").strip() or UNKNOWN_SENDER
            yield RawMessage(
                body=body,
                sender_address=address,
                received_at=_to_epoch_millis(getattr(row, "date", None), fallback_time)
            )

        if skipped:
            logger.info(f"Skipped {skipped} rows with an empty body")


def _to_epoch_millis(value, default: int) -> int:
    if value is None or (isinstance(value, str) and not value.strip()):
        return default

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return int(value) if not pd.isna(value) else default

    text = str(value).strip()
    if text.isdigit():
        return int(text)

    timestamp = pd.to_datetime(text, errors="coerce", utc=True)
    if pd.isna(timestamp):
        logger.warning(f"Unparseable date in SMS export: {text}")
        return default
    return int(timestamp.value // 1_000_000)
