# MIT License
# Copyright (c) 2025 Hashborn

import os
from typing import Dict, Optional
from ..types.common import MAX_UINT256

# Global Constants
DENOM = "stt"
DECIMALS = 18

# Each distribution pass credits floor(stake / REWARD_DIVISOR), i.e. 1%
REWARD_DIVISOR = 100

class LedgerConfig:
    def __init__(self,
                 network_id: str,
                 name: str = "Staking Token",
                 symbol: str = "STT",
                 decimals: int = DECIMALS,
                 initial_supply: int = 0,
                 owner: Optional[str] = None,
                 reward_divisor: int = REWARD_DIVISOR,
                 max_amount: int = MAX_UINT256):
        self.network_id = network_id
        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self.initial_supply = initial_supply
        # Owner is normally supplied by genesis.json or the constructor
        self.owner = owner
        self.reward_divisor = reward_divisor
        self.max_amount = max_amount

NETWORKS: Dict[str, LedgerConfig] = {
    "devnet": LedgerConfig(
        network_id="devnet",
        initial_supply=1000 * 10**DECIMALS,
    ),
    "default": LedgerConfig(
        network_id="default",
        initial_supply=525 * 10**DECIMALS,
    ),
}

# Default to devnet unless overridden
CURRENT_NETWORK = NETWORKS[os.environ.get("STAKE_NETWORK", "devnet")]
