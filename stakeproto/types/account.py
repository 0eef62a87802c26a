from pydantic import BaseModel

class AccountView(BaseModel):
    """Read-only snapshot of the three balance pools of one account."""
    address: str
    balance: int = 0          # Liquid (spendable) balance
    stake: int = 0            # Locked in staking
    reward: int = 0           # Accrued, not yet minted
    is_stakeholder: bool = False
    stakeholder_index: int = 0
    next_reward: int = 0      # What the next distribution pass would credit
