# MIT License
# Copyright (c) 2025 Hashborn

from typing import Optional, List, Tuple
import logging
import os
import json
import threading
from stakeproto.types.operation import Operation
from stakeproto.types.account import AccountView
from stakeproto.types.common import OpType, ProtocolError
from stakeproto.config.params import CURRENT_NETWORK, LedgerConfig
from ..storage.db import StorageDB
from ..observability.metrics import update_operation_metrics
from .state import LedgerState
from .events import EventBus, event_bus
from .receipts import OpReceipt, STATUS_APPLIED, STATUS_FAILED

logger = logging.getLogger(__name__)

# Event emitted after each operation type commits
EVENT_FOR_OP = {
    OpType.TRANSFER: "transfer",
    OpType.CREATE_STAKE: "stake_created",
    OpType.REMOVE_STAKE: "stake_removed",
    OpType.DISTRIBUTE_REWARDS: "rewards_distributed",
    OpType.WITHDRAW_REWARD: "reward_withdrawn",
}

class StakingToken:
    """
    Token ledger with staking and owner-triggered reward distribution.

    All mutating operations funnel through `submit`, which holds one lock
    for the whole operation, applies it to a clone of the state and swaps
    the clone in only after it has been persisted. A rejected operation
    leaves state exactly as it was.
    """

    def __init__(self, db_path: str, owner: Optional[str] = None, initial_supply: Optional[int] = None,
                 config: Optional[LedgerConfig] = None, bus: Optional[EventBus] = None):
        self.db = StorageDB(db_path)
        self._lock = threading.RLock()
        self.config = config or CURRENT_NETWORK
        self.events = bus or event_bus

        # genesis.json lives next to the database
        self.genesis_path = None
        if db_path != ":memory:":
            self.genesis_path = os.path.join(os.path.dirname(db_path), "genesis.json")

        self._load_ledger_state(owner, initial_supply)

    def _load_ledger_state(self, owner: Optional[str], initial_supply: Optional[int]):
        state = LedgerState.load(self.db, self.config.reward_divisor, self.config.max_amount)
        self.seq = self.db.get_last_seq()
        if state:
            self.state = state
            logger.info(f"Ledger loaded at operation {self.seq} ({len(state.registry)} stakeholders)")
        else:
            logger.info("Ledger empty, applying genesis")
            self.state = self._apply_genesis(owner, initial_supply)

    def _apply_genesis(self, owner: Optional[str], initial_supply: Optional[int]) -> LedgerState:
        """
        Sets the owner and mints the initial allocation.

        Precedence: constructor arguments, then genesis.json, then config.
        """
        state = LedgerState.empty(self.db, self.config.reward_divisor, self.config.max_amount)
        alloc = {}

        if owner is not None or initial_supply is not None:
            owner = owner or self.config.owner
            supply = initial_supply if initial_supply is not None else self.config.initial_supply
            if owner and supply:
                alloc[owner] = supply
        elif self.genesis_path and os.path.exists(self.genesis_path):
            with open(self.genesis_path, "r") as f:
                data = json.load(f)
            owner = data.get("owner")
            alloc = {address: int(amount) for address, amount in data.get("alloc", {}).items()}
        else:
            owner = self.config.owner
            if owner and self.config.initial_supply:
                alloc[owner] = self.config.initial_supply

        if not owner:
            logger.warning("No owner configured. Reward distribution will be rejected.")
        state.access.owner = owner

        for address, amount in alloc.items():
            state.token.mint(address, amount)

        state.persist()
        logger.info(f"Applied genesis allocation to {len(alloc)} accounts. Owner: {owner}")
        return state

    # --- Thread-safe wrappers ---
    def submit(self, op: Operation) -> OpReceipt:
        """
        Applies one operation atomically and returns its receipt.

        Raises the LedgerError (or ValidationError) that rejected the
        operation; the failed receipt is attached as `error.receipt`.
        """
        with self._lock:
            return self._submit_impl(op)

    def _submit_impl(self, op: Operation) -> OpReceipt:
        seq = self.seq + 1
        tmp_state = self.state.clone()
        minted_before = tmp_state.token.total_minted
        burned_before = tmp_state.token.total_burned

        try:
            result = tmp_state.apply_operation(op)
        except ProtocolError as e:
            receipt = OpReceipt(
                seq=seq,
                op_type=op.op_type.value,
                caller=op.caller,
                amount=op.amount,
                status=STATUS_FAILED,
                error_code=e.code,
                error=str(e),
            )
            self.db.save_operation(*receipt.to_row())
            self.seq = seq
            logger.warning(f"Operation {seq} rejected ({op.describe()}): {e}")
            update_operation_metrics(receipt)
            e.receipt = receipt
            self.events.emit("operation_failed", receipt=receipt, error=e)
            raise

        receipt = OpReceipt(
            seq=seq,
            op_type=op.op_type.value,
            caller=op.caller,
            amount=op.amount,
            status=STATUS_APPLIED,
            minted=tmp_state.token.total_minted - minted_before,
            burned=tmp_state.token.total_burned - burned_before,
            details=result.to_dict() if result else {},
        )

        # Old state stays current until the write succeeds
        tmp_state.persist(receipt.to_row())
        self.state = tmp_state
        self.seq = seq

        logger.info(f"Operation {seq} applied: {op.describe()}")
        update_operation_metrics(receipt)
        self.events.emit(EVENT_FOR_OP[op.op_type], receipt=receipt)
        return receipt

    # --- Mutators (caller is always explicit) ---
    def transfer(self, caller: str, to_address: str, amount: int) -> OpReceipt:
        return self.submit(Operation(op_type=OpType.TRANSFER, caller=caller, to_address=to_address, amount=amount))

    def create_stake(self, caller: str, amount: int) -> OpReceipt:
        return self.submit(Operation(op_type=OpType.CREATE_STAKE, caller=caller, amount=amount))

    def remove_stake(self, caller: str, amount: int) -> OpReceipt:
        return self.submit(Operation(op_type=OpType.REMOVE_STAKE, caller=caller, amount=amount))

    def distribute_rewards(self, caller: str) -> OpReceipt:
        return self.submit(Operation(op_type=OpType.DISTRIBUTE_REWARDS, caller=caller))

    def withdraw_reward(self, caller: str) -> OpReceipt:
        return self.submit(Operation(op_type=OpType.WITHDRAW_REWARD, caller=caller))

    # --- Reads ---
    @property
    def owner(self) -> Optional[str]:
        return self.state.access.owner

    def is_owner(self, account: str) -> bool:
        return self.state.access.is_owner(account)

    def balance_of(self, account: str) -> int:
        return self.state.token.balance_of(account)

    def total_supply(self) -> int:
        return self.state.token.total_supply()

    def stake_of(self, account: str) -> int:
        return self.state.stake_of(account)

    def total_stakes(self) -> int:
        return self.state.total_stakes()

    def reward_of(self, account: str) -> int:
        return self.state.reward_of(account)

    def total_rewards(self) -> int:
        return self.state.total_rewards()

    def is_stakeholder(self, account: str) -> Tuple[bool, int]:
        return self.state.is_stakeholder(account)

    def calculate_reward(self, account: str) -> int:
        return self.state.calculate_reward(account)

    def stakeholders(self) -> List[str]:
        return self.state.registry.snapshot()

    def get_account(self, address: str) -> AccountView:
        return self.state.get_account(address)

    def get_receipt(self, seq: int) -> Optional[OpReceipt]:
        raw = self.db.get_operation(seq)
        return OpReceipt.from_json(raw) if raw else None

    def get_receipts(self, limit: int = 50) -> List[OpReceipt]:
        return [OpReceipt.from_json(raw) for raw in self.db.get_operations(limit)]

    def close(self):
        self.db.close()
