"""
Reward distribution pass.

Walks a snapshot of the stakeholder registry and credits each member's
reward entry with `calculate_reward(stake)`. Nothing is minted here;
rewards become supply only when withdrawn.
"""
from dataclasses import dataclass, field
from typing import Dict
import logging

from .registry import StakeholderRegistry
from .rewards import RewardLedger, calculate_reward
from .stakes import StakeLedger

logger = logging.getLogger(__name__)


@dataclass
class DistributionResult:
    """
    Outcome of one distribution pass.

    Attributes:
        stakeholders: Number of registry members visited
        total_credited: Sum of rewards credited in this pass
        credited: Per-account reward credited (zero rewards included)
    """
    stakeholders: int = 0
    total_credited: int = 0
    credited: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "stakeholders": self.stakeholders,
            "total_credited": self.total_credited,
            "credited": {k: str(v) for k, v in self.credited.items()},
        }


class DistributionEngine:
    def __init__(self, stakes: StakeLedger, rewards: RewardLedger,
                 registry: StakeholderRegistry, divisor: int):
        self.stakes = stakes
        self.rewards = rewards
        self.registry = registry
        self.divisor = divisor

    def calculate_reward(self, account: str) -> int:
        return calculate_reward(self.stakes.stake_of(account), self.divisor)

    def distribute(self) -> DistributionResult:
        result = DistributionResult()
        # Each reward depends only on that account's stake, so order is irrelevant
        for account in self.registry.snapshot():
            reward = self.calculate_reward(account)
            self.rewards.credit(account, reward)
            result.credited[account] = reward
            result.total_credited += reward
            result.stakeholders += 1

        logger.info(f"Distributed {result.total_credited} to {result.stakeholders} stakeholder(s)")
        return result
