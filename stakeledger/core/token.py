# MIT License
# Copyright (c) 2025 Hashborn

from typing import Dict, Optional
import logging
from stakeproto.types.common import MAX_UINT256, InsufficientBalance
from .safemath import checked_add, checked_sub

logger = logging.getLogger(__name__)

class BalanceLedger:
    """
    Liquid balances and total supply of the fungible token.

    The staking core only mints into and burns out of this ledger; it never
    touches `_balances` directly.
    """

    def __init__(self, balances: Optional[Dict[str, int]] = None, total_supply: int = 0,
                 max_amount: int = MAX_UINT256):
        self._balances: Dict[str, int] = balances if balances is not None else {}
        self._total_supply = total_supply
        self.max_amount = max_amount
        # Lifetime counters, used for metrics and receipts
        self.total_minted = 0
        self.total_burned = 0

    def clone(self) -> 'BalanceLedger':
        cloned = BalanceLedger(dict(self._balances), self._total_supply, self.max_amount)
        cloned.total_minted = self.total_minted
        cloned.total_burned = self.total_burned
        return cloned

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def total_supply(self) -> int:
        return self._total_supply

    def items(self):
        return self._balances.items()

    def _set_balance(self, account: str, amount: int):
        # Zero balances have no entry
        if amount:
            self._balances[account] = amount
        else:
            self._balances.pop(account, None)

    def mint(self, account: str, amount: int):
        if amount == 0:
            return
        # Supply bounds every balance, so checking it first covers both
        self._total_supply = checked_add(self._total_supply, amount, self.max_amount)
        self._balances[account] = checked_add(self.balance_of(account), amount, self.max_amount)
        self.total_minted += amount
        logger.debug(f"Minted {amount} to {account}")

    def burn(self, account: str, amount: int):
        balance = self.balance_of(account)
        if amount > balance:
            raise InsufficientBalance(f"Insufficient balance: have {balance}, need {amount}")
        self._set_balance(account, balance - amount)
        self._total_supply = checked_sub(self._total_supply, amount)
        self.total_burned += amount
        logger.debug(f"Burned {amount} from {account}")

    def transfer(self, sender: str, recipient: str, amount: int):
        balance = self.balance_of(sender)
        if amount > balance:
            raise InsufficientBalance(f"Insufficient balance: have {balance}, need {amount}")
        if amount == 0:
            return
        self._set_balance(sender, balance - amount)
        self._balances[recipient] = checked_add(self.balance_of(recipient), amount, self.max_amount)
