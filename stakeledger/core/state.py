# MIT License
# Copyright (c) 2025 Hashborn

from typing import Dict, Optional, Tuple
import json
import logging
from stakeproto.types.operation import Operation
from stakeproto.types.account import AccountView
from stakeproto.types.common import MAX_UINT256, OpType, InvalidAmount, ValidationError
from stakeproto.config.params import REWARD_DIVISOR
from ..storage.db import StorageDB
from .token import BalanceLedger
from .access import Ownable
from .registry import StakeholderRegistry
from .stakes import StakeLedger
from .rewards import RewardLedger
from .distribution import DistributionEngine, DistributionResult

logger = logging.getLogger(__name__)

class LedgerState:
    def __init__(self, db: StorageDB,
                 token: BalanceLedger = None,
                 stakes: StakeLedger = None,
                 rewards: RewardLedger = None,
                 registry: StakeholderRegistry = None,
                 access: Ownable = None,
                 reward_divisor: int = REWARD_DIVISOR,
                 max_amount: int = MAX_UINT256):
        self.db = db
        self.max_amount = max_amount
        self.reward_divisor = reward_divisor
        self.token = token if token is not None else BalanceLedger(max_amount=max_amount)
        self.stakes = stakes if stakes is not None else StakeLedger(max_amount=max_amount)
        self.rewards = rewards if rewards is not None else RewardLedger(max_amount=max_amount)
        self.registry = registry if registry is not None else StakeholderRegistry()
        self.access = access if access is not None else Ownable()

    def clone(self) -> 'LedgerState':
        """Creates a copy of the state. Operations run against the copy."""
        return LedgerState(
            self.db,
            self.token.clone(),
            self.stakes.clone(),
            self.rewards.clone(),
            self.registry.clone(),
            Ownable(self.access.owner),
            self.reward_divisor,
            self.max_amount,
        )

    @property
    def engine(self) -> DistributionEngine:
        return DistributionEngine(self.stakes, self.rewards, self.registry, self.reward_divisor)

    # --- Reads ---
    def stake_of(self, account: str) -> int:
        return self.stakes.stake_of(account)

    def total_stakes(self) -> int:
        return self.stakes.total_stakes()

    def reward_of(self, account: str) -> int:
        return self.rewards.reward_of(account)

    def total_rewards(self) -> int:
        return self.rewards.total_rewards()

    def is_stakeholder(self, account: str) -> Tuple[bool, int]:
        return self.registry.contains(account)

    def calculate_reward(self, account: str) -> int:
        return self.engine.calculate_reward(account)

    def get_account(self, address: str) -> AccountView:
        found, index = self.registry.contains(address)
        return AccountView(
            address=address,
            balance=self.token.balance_of(address),
            stake=self.stakes.stake_of(address),
            reward=self.rewards.reward_of(address),
            is_stakeholder=found,
            stakeholder_index=index,
            next_reward=self.calculate_reward(address),
        )

    # --- Staking operations ---
    def _check_amount(self, amount: int):
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise InvalidAmount(f"Amount must be an integer, got {amount!r}")
        if amount < 0:
            raise InvalidAmount(f"Amount must be non-negative, got {amount}")
        if amount > self.max_amount:
            raise InvalidAmount(f"Amount {amount} exceeds {self.max_amount}")

    def create_stake(self, caller: str, amount: int):
        self._check_amount(amount)
        if amount == 0:
            return
        self.token.burn(caller, amount)
        # Registry insertion is decided on the pre-update stake
        if self.stakes.stake_of(caller) == 0:
            self.registry.add(caller)
        self.stakes.credit(caller, amount)

    def remove_stake(self, caller: str, amount: int):
        self._check_amount(amount)
        remaining = self.stakes.debit(caller, amount)
        if remaining == 0:
            self.registry.remove(caller)
        self.token.mint(caller, amount)

    def distribute_rewards(self, caller: str) -> DistributionResult:
        self.access.require_owner(caller)
        return self.engine.distribute()

    def withdraw_reward(self, caller: str) -> int:
        reward = self.rewards.take(caller)
        if reward == 0:
            return 0
        self.token.mint(caller, reward)
        logger.debug(f"Withdrew reward {reward} for {caller}")
        return reward

    def transfer(self, caller: str, to_address: str, amount: int):
        self._check_amount(amount)
        self.token.transfer(caller, to_address, amount)

    def apply_operation(self, op: Operation) -> Optional[DistributionResult]:
        """
        Applies operation to state (in-memory). Raises error on failure.

        A failure may leave this state partially modified; callers apply
        operations to a clone and discard it on error.
        """
        if not op.caller:
            raise ValidationError("Operation must have a caller")

        if op.op_type == OpType.TRANSFER:
            if not op.to_address:
                raise ValidationError("Transfer must have to_address")
            self.transfer(op.caller, op.to_address, op.amount)

        elif op.op_type == OpType.CREATE_STAKE:
            self.create_stake(op.caller, op.amount)

        elif op.op_type == OpType.REMOVE_STAKE:
            self.remove_stake(op.caller, op.amount)

        elif op.op_type == OpType.DISTRIBUTE_REWARDS:
            return self.distribute_rewards(op.caller)

        elif op.op_type == OpType.WITHDRAW_REWARD:
            self.withdraw_reward(op.caller)

        else:
            raise ValidationError(f"Unknown operation type {op.op_type}")

        return None

    # --- Persistence ---
    def to_state_items(self) -> Dict[str, str]:
        items: Dict[str, str] = {}
        for addr, bal in self.token.items():
            items[f"bal:{addr}"] = str(bal)
        for addr, stake in self.stakes.items():
            items[f"stk:{addr}"] = str(stake)
        for addr, reward in self.rewards.items():
            items[f"rwd:{addr}"] = str(reward)
        items["meta:total_supply"] = str(self.token.total_supply())
        items["meta:total_minted"] = str(self.token.total_minted)
        items["meta:total_burned"] = str(self.token.total_burned)
        items["meta:owner"] = self.access.owner or ""
        # Registry order must survive restarts: removal is swap-with-last
        items["stakeholders"] = json.dumps(self.registry.snapshot())
        return items

    def persist(self, receipt_row: Optional[Tuple[int, str, str, str]] = None):
        """Writes the whole state (and optionally a receipt) in one DB transaction."""
        self.db.replace_state(self.to_state_items(), receipt_row)

    @staticmethod
    def _load_prefix(db: StorageDB, prefix: str) -> Dict[str, int]:
        return {k[len(prefix):]: int(v) for k, v in db.get_state_by_prefix(prefix).items()}

    @staticmethod
    def load(db: StorageDB, reward_divisor: int = REWARD_DIVISOR,
             max_amount: int = MAX_UINT256) -> Optional['LedgerState']:
        """Rebuilds state from the DB. Returns None if the store is empty."""
        total_supply = db.get_state("meta:total_supply")
        if total_supply is None:
            return None

        token = BalanceLedger(LedgerState._load_prefix(db, "bal:"), int(total_supply), max_amount)
        token.total_minted = int(db.get_state("meta:total_minted") or 0)
        token.total_burned = int(db.get_state("meta:total_burned") or 0)
        members = json.loads(db.get_state("stakeholders") or "[]")

        return LedgerState(
            db,
            token,
            StakeLedger(LedgerState._load_prefix(db, "stk:"), max_amount),
            RewardLedger(LedgerState._load_prefix(db, "rwd:"), max_amount),
            StakeholderRegistry(members),
            Ownable(db.get_state("meta:owner") or None),
            reward_divisor,
            max_amount,
        )

    @staticmethod
    def empty(db: StorageDB, reward_divisor: int = REWARD_DIVISOR,
              max_amount: int = MAX_UINT256) -> 'LedgerState':
        """Returns an empty state."""
        return LedgerState(db, reward_divisor=reward_divisor, max_amount=max_amount)
