"""Transaction persistence collaborator with original-message dedup.

Two backends, chosen by STORE_BACKEND ("memory" or "redis"). The Redis backend
watches the message hash and writes the claim together with the record in one
transaction, so concurrent workers cannot insert the same SMS twice and a
failed write leaves no claim behind.
"""

import hashlib
import os
import threading
import uuid
from typing import Dict, List, Optional
import redis
from sms_pipeline.constants import TransactionStatus
from sms_pipeline.models.outcome import ExtractionOutcome
from sms_pipeline.utils.errors import DuplicateTransactionError, StoreError
from sms_pipeline.utils.logging import get_logger
from sms_pipeline.utils.metrics import redis_connection_healthy

logger = get_logger(__name__)


def message_key(original_message: str) -> str:
    """Stable dedup key for a message body"""
    return hashlib.sha256(original_message.encode("utf-8")).hexdigest()


class InMemoryTransactionStore:
    """Process-local store used for tests, demos and the CLI"""

    def __init__(self):
        self._lock = threading.Lock()
        self._transactions: Dict[str, ExtractionOutcome] = {}
        self._by_message: Dict[str, str] = {}

    def insert(self, outcome: ExtractionOutcome) -> str:
        key = message_key(outcome.original_message)
        with self._lock:
            if key in self._by_message:
                raise DuplicateTransactionError(
                    f"Message already stored as transaction {self._by_message[key]}"
                )
            transaction_id = str(uuid.uuid4())
            self._transactions[transaction_id] = outcome
            self._by_message[key] = transaction_id

        logger.info("Stored transaction (in-memory)", transaction_id=transaction_id)
        return transaction_id

    def exists(self, original_message: str) -> bool:
        return message_key(original_message) in self._by_message

    def get(self, transaction_id: str) -> Optional[ExtractionOutcome]:
        return self._transactions.get(transaction_id)

    def list_by_status(self, status: TransactionStatus) -> List[ExtractionOutcome]:
        with self._lock:
            return [t for t in self._transactions.values() if t.status == status]

    def count(self) -> int:
        return len(self._transactions)


class RedisTransactionStore:
    """Redis-backed store; records are JSON strings keyed by transaction id"""

    KEY_PREFIX = "sms"

    def __init__(self, client: "redis.Redis"):
        self.client = client

    @classmethod
    def connect(cls, host: Optional[str] = None, db: Optional[int] = None) -> "RedisTransactionStore":
        """
        Connect using REDIS_HOST ("host:port") and REDIS_DB

        Raises:
            StoreError: If Redis is unreachable
        """
        redis_host, redis_port = (host or os.getenv("REDIS_HOST", "localhost:6379")).split(':')
        try:
            client = redis.Redis(
                host=redis_host,
                port=int(redis_port),
                db=int(db if db is not None else os.getenv("REDIS_DB", 0)),
                decode_responses=True,
                socket_keepalive=True,
                socket_connect_timeout=5
            )
            client.ping()
        except redis.RedisError as e:
            redis_connection_healthy.set(0)
            raise StoreError(f"Redis connection failed: {e}")

        redis_connection_healthy.set(1)
        logger.info("Connected to Redis", host=redis_host, port=redis_port)
        return cls(client)

    def _message_key(self, original_message: str) -> str:
        return f"{self.KEY_PREFIX}:msg:{message_key(original_message)}"

    def _txn_key(self, transaction_id: str) -> str:
        return f"{self.KEY_PREFIX}:txn:{transaction_id}"

    def _status_key(self, status: TransactionStatus) -> str:
        return f"{self.KEY_PREFIX}:status:{status.value}"

    def insert(self, outcome: ExtractionOutcome) -> str:
        """
        Write the message claim, the record and the status index in one MULTI/EXEC.

        Raises:
            DuplicateTransactionError: If the message is already claimed
            StoreError: If Redis fails; nothing was written
        """
        transaction_id = str(uuid.uuid4())
        msg_key = self._message_key(outcome.original_message)
        try:
            with self.client.pipeline() as pipe:
                pipe.watch(msg_key)
                existing = pipe.get(msg_key)
                if existing:
                    raise DuplicateTransactionError(f"Message already stored as transaction {existing}")

                pipe.multi()
                pipe.set(msg_key, transaction_id)
                pipe.set(self._txn_key(transaction_id), outcome.model_dump_json())
                pipe.sadd(self._status_key(outcome.status), transaction_id)
                pipe.execute()
        except redis.WatchError:
            # Only a claim by another writer touches the watched key
            raise DuplicateTransactionError("Message claimed concurrently by another writer")
        except redis.RedisError as e:
            raise StoreError(f"Failed to store transaction: {e}")

        logger.info("Stored transaction", transaction_id=transaction_id)
        return transaction_id

    def exists(self, original_message: str) -> bool:
        try:
            return bool(self.client.exists(self._message_key(original_message)))
        except redis.RedisError as e:
            raise StoreError(f"Failed to check message: {e}")

    def get(self, transaction_id: str) -> Optional[ExtractionOutcome]:
        try:
            value = self.client.get(self._txn_key(transaction_id))
        except redis.RedisError as e:
            raise StoreError(f"Failed to load transaction: {e}")
        return ExtractionOutcome.model_validate_json(value) if value else None

    def list_by_status(self, status: TransactionStatus) -> List[ExtractionOutcome]:
        try:
            ids = sorted(self.client.smembers(self._status_key(status)))
        except redis.RedisError as e:
            raise StoreError(f"Failed to list transactions: {e}")
        return [t for t in (self.get(i) for i in ids) if t is not None]

    def check_health(self) -> bool:
        try:
            self.client.ping()
            redis_connection_healthy.set(1)
            return True
        except redis.RedisError:
            redis_connection_healthy.set(0)
            return False


def create_transaction_store(backend: Optional[str] = None):
    """
    Select the store backend ("memory" or "redis", default STORE_BACKEND or memory).

    An unreachable Redis falls back to the in-memory store with a warning.
    """
    backend = (backend or os.getenv("STORE_BACKEND", "memory")).lower()

    if backend == "redis":
        try:
            return RedisTransactionStore.connect()
        except StoreError as e:
            logger.warning(f"{e}; falling back to in-memory store")

    elif backend != "memory":
        logger.warning(f"Unknown store backend '{backend}', using in-memory")

    return InMemoryTransactionStore()
