from typing import Dict, Optional
import logging
from stakeproto.types.common import MAX_UINT256, InsufficientStake
from .safemath import checked_add

logger = logging.getLogger(__name__)


class StakeLedger:
    """Account -> staked amount. Accounts with no stake have no entry."""

    def __init__(self, stakes: Optional[Dict[str, int]] = None, max_amount: int = MAX_UINT256):
        self._stakes: Dict[str, int] = stakes if stakes is not None else {}
        self.max_amount = max_amount

    def clone(self) -> 'StakeLedger':
        return StakeLedger(dict(self._stakes), self.max_amount)

    def stake_of(self, account: str) -> int:
        return self._stakes.get(account, 0)

    def total_stakes(self) -> int:
        return sum(self._stakes.values())

    def items(self):
        return self._stakes.items()

    def credit(self, account: str, amount: int) -> int:
        new_stake = checked_add(self.stake_of(account), amount, self.max_amount)
        if new_stake:
            self._stakes[account] = new_stake
        return new_stake

    def debit(self, account: str, amount: int) -> int:
        stake = self.stake_of(account)
        if amount > stake:
            logger.debug(f"Unstake of {amount} refused for {account} (stake {stake})")
            raise InsufficientStake(f"Insufficient stake: have {stake}, trying to remove {amount}")
        new_stake = stake - amount
        if new_stake == 0:
            self._stakes.pop(account, None)
        else:
            self._stakes[account] = new_stake
        return new_stake
