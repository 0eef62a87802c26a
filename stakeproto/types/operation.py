# MIT License
# Copyright (c) 2025 Hashborn

from pydantic import BaseModel, Field
from typing import Optional
import time
from .common import OpType

class Operation(BaseModel):
    op_type: OpType
    caller: str                        # Account acting on its own balances
    amount: int = 0                    # in minimal units (10^-18 STT)
    to_address: Optional[str] = None   # TRANSFER only
    timestamp: int = Field(default_factory=lambda: int(time.time()))

    def describe(self) -> str:
        parts = [self.op_type.value, self.caller[:10]]
        if self.op_type in (OpType.TRANSFER, OpType.CREATE_STAKE, OpType.REMOVE_STAKE):
            parts.append(str(self.amount))
        if self.to_address:
            parts.append(f"-> {self.to_address[:10]}")
        return " ".join(parts)
