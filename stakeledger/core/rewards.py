# MIT License
# Copyright (c) 2025 Hashborn

from typing import Dict, Optional
import logging
from stakeproto.config.params import REWARD_DIVISOR
from stakeproto.types.common import MAX_UINT256
from .safemath import checked_add

logger = logging.getLogger(__name__)


def calculate_reward(stake: int, divisor: int = REWARD_DIVISOR) -> int:
    """
    Calculate the reward one distribution pass credits for a stake.

    Flat 1% of the current stake, floored. Stakes below `divisor` earn
    nothing.

    Args:
        stake: Current staked amount in minimal units
        divisor: Stake units per reward unit

    Returns:
        Reward in minimal units
    """
    return stake // divisor


class RewardLedger:
    """
    Account -> accrued, unwithdrawn reward.

    Entries are only ever zeroed, never removed.
    """

    def __init__(self, rewards: Optional[Dict[str, int]] = None, max_amount: int = MAX_UINT256):
        self._rewards: Dict[str, int] = rewards if rewards is not None else {}
        self.max_amount = max_amount

    def clone(self) -> 'RewardLedger':
        return RewardLedger(dict(self._rewards), self.max_amount)

    def reward_of(self, account: str) -> int:
        return self._rewards.get(account, 0)

    def total_rewards(self) -> int:
        return sum(self._rewards.values())

    def items(self):
        return self._rewards.items()

    def credit(self, account: str, amount: int):
        self._rewards[account] = checked_add(self.reward_of(account), amount, self.max_amount)

    def take(self, account: str) -> int:
        """Zeroes the account's entry and returns what it held."""
        amount = self.reward_of(account)
        if account in self._rewards:
            self._rewards[account] = 0
            logger.debug(f"Reward of {amount} taken by {account}")
        return amount
