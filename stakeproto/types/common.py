# MIT License
# Copyright (c) 2025 Hashborn

from enum import Enum

# Amounts are unsigned 256-bit integers
MAX_UINT256 = 2**256 - 1

class OpType(str, Enum):
    TRANSFER = "TRANSFER"
    CREATE_STAKE = "CREATE_STAKE"
    REMOVE_STAKE = "REMOVE_STAKE"
    DISTRIBUTE_REWARDS = "DISTRIBUTE_REWARDS"   # Owner only
    WITHDRAW_REWARD = "WITHDRAW_REWARD"

class ProtocolError(Exception):
    code = "PROTOCOL_ERROR"

class ValidationError(ProtocolError):
    code = "VALIDATION_ERROR"

class LedgerError(ProtocolError):
    """Base class for rejected ledger operations. State is left untouched."""
    code = "LEDGER_ERROR"

class InsufficientBalance(LedgerError):
    code = "INSUFFICIENT_BALANCE"

class InsufficientStake(LedgerError):
    code = "INSUFFICIENT_STAKE"

class Unauthorized(LedgerError):
    code = "UNAUTHORIZED"

class ArithmeticOverflow(LedgerError):
    code = "ARITHMETIC_OVERFLOW"

class ArithmeticUnderflow(LedgerError):
    code = "ARITHMETIC_UNDERFLOW"

class InvalidAmount(LedgerError, ValidationError):
    code = "INVALID_AMOUNT"
