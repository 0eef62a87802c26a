"""
Operation receipts.

Every operation submitted to the ledger gets a sequence number and a
receipt, whether it was applied or rejected.
"""
from dataclasses import dataclass, field
from typing import Optional, Dict, Any
import json
import time

STATUS_APPLIED = "applied"
STATUS_FAILED = "failed"


@dataclass
class OpReceipt:
    """
    Operation receipt.

    Attributes:
        seq: Sequence number assigned by the ledger
        op_type: Operation type value (e.g. 'CREATE_STAKE')
        caller: Account that submitted the operation
        amount: Requested amount (0 for amount-less operations)
        status: 'applied' or 'failed'
        error_code: LedgerError code if failed (None otherwise)
        error: Error message if failed (None otherwise)
        minted: Supply minted by the operation
        burned: Supply burned by the operation
        details: Operation specific data (e.g. distribution totals)
        timestamp: When the receipt was created (unix timestamp)
    """
    seq: int
    op_type: str
    caller: str
    amount: int = 0
    status: str = STATUS_APPLIED
    error_code: Optional[str] = None
    error: Optional[str] = None
    minted: int = 0
    burned: int = 0
    details: Dict[str, Any] = field(default_factory=dict)
    timestamp: int = 0

    def __post_init__(self):
        if self.timestamp == 0:
            self.timestamp = int(time.time())

    @property
    def applied(self) -> bool:
        return self.status == STATUS_APPLIED

    def to_dict(self) -> dict:
        """Convert receipt to dictionary for API response. Amounts as strings."""
        return {
            "seq": self.seq,
            "op_type": self.op_type,
            "caller": self.caller,
            "amount": str(self.amount),
            "status": self.status,
            "error_code": self.error_code,
            "error": self.error,
            "minted": str(self.minted),
            "burned": str(self.burned),
            "details": self.details,
            "timestamp": self.timestamp,
        }

    def to_row(self):
        """(seq, op_type, status, data) row for StorageDB."""
        return (self.seq, self.op_type, self.status, json.dumps(self.to_dict()))

    @staticmethod
    def from_json(raw: str) -> 'OpReceipt':
        data = json.loads(raw)
        return OpReceipt(
            seq=data["seq"],
            op_type=data["op_type"],
            caller=data["caller"],
            amount=int(data["amount"]),
            status=data["status"],
            error_code=data.get("error_code"),
            error=data.get("error"),
            minted=int(data["minted"]),
            burned=int(data["burned"]),
            details=data.get("details") or {},
            timestamp=data["timestamp"],
        )
