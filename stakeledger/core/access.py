from typing import Optional
import logging
from stakeproto.types.common import Unauthorized

logger = logging.getLogger(__name__)

class Ownable:
    """Single-owner access control."""

    def __init__(self, owner: Optional[str] = None):
        self.owner = owner

    def is_owner(self, caller: str) -> bool:
        return self.owner is not None and caller == self.owner

    def require_owner(self, caller: str):
        if not self.is_owner(caller):
            logger.warning(f"Owner-only call from {caller}")
            raise Unauthorized(f"{caller} is not the owner")
