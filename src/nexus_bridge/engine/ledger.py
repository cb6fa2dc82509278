"""
In-memory operation ledger.

Keeps one ``BridgeOperation`` per operation id for the lifetime of the
process. Writes are create-or-update: later writes merge their fields into
the existing record, ``created_at`` is kept from the first write and
``updated_at`` never moves backwards.
"""

import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..schemas.bases import BridgeOperation


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OperationLedger:
    """
    Thread-safe store of bridge operation records.

    Usage:
        ledger = OperationLedger()
        ledger.record("bridge-1", from_chain_id=10, to_chain_id=8453,
                      token="USDC", amount="25000000", status="pending")
        ledger.record("bridge-1", status="completed", tx_hash="0xabc")
        ledger.get("bridge-1").status  # OperationStatus.COMPLETED
    """

    def __init__(self, clock=_utcnow) -> None:
        self._clock = clock
        self._operations: Dict[str, BridgeOperation] = {}
        self._lock = threading.Lock()

    def record(self, operation_id: str, **fields: Any) -> BridgeOperation:
        """
        Create or update the record for ``operation_id``.

        Args:
            operation_id: Operation id.
            **fields: ``BridgeOperation`` fields by name (``tx_hash``,
                ``status``, ``error``...). Omitted fields keep their
                previous value on update.

        Returns:
            BridgeOperation: The stored record.

        Raises:
            pydantic.ValidationError: If a first write lacks a required field
                or a value fails validation.
        """
        fields.pop("id", None)
        fields.pop("created_at", None)
        fields.pop("updated_at", None)

        with self._lock:
            now = self._clock()
            existing = self._operations.get(operation_id)
            if existing is None:
                data = {"id": operation_id, "created_at": now, "updated_at": now}
            else:
                data = existing.model_dump()
                data["updated_at"] = max(now, existing.updated_at)
            data.update(fields)

            operation = BridgeOperation.model_validate(data)
            self._operations[operation_id] = operation
            return operation

    def get(self, operation_id: str) -> Optional[BridgeOperation]:
        with self._lock:
            return self._operations.get(operation_id)

    def list(self) -> List[BridgeOperation]:
        """All records, most recently updated first."""
        with self._lock:
            operations = list(self._operations.values())
        return sorted(operations, key=lambda op: op.updated_at, reverse=True)

    def __len__(self) -> int:
        with self._lock:
            return len(self._operations)
