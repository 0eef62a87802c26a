# MIT License
# Copyright (c) 2025 Hashborn

from typing import Iterator, List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)


class StakeholderRegistry:
    """
    Unordered roster of accounts holding a non-zero stake.

    Membership is a linear scan, which is fine since the distribution pass
    over the roster is O(n) anyway. Removal swaps the member with the last
    entry and truncates, so iteration order is not stable across removals.
    """

    def __init__(self, members: Optional[List[str]] = None):
        self._members: List[str] = members if members is not None else []

    def clone(self) -> 'StakeholderRegistry':
        return StakeholderRegistry(list(self._members))

    def contains(self, account: str) -> Tuple[bool, int]:
        """Returns (found, index). Index is 0 when not found."""
        for index, member in enumerate(self._members):
            if member == account:
                return True, index
        return False, 0

    def add(self, account: str):
        found, _ = self.contains(account)
        if not found:
            self._members.append(account)
            logger.debug(f"Stakeholder added: {account}")

    def remove(self, account: str):
        found, index = self.contains(account)
        if not found:
            return
        self._members[index] = self._members[-1]
        self._members.pop()
        logger.debug(f"Stakeholder removed: {account}")

    def snapshot(self) -> List[str]:
        return list(self._members)

    def __iter__(self) -> Iterator[str]:
        return iter(self._members)

    def __len__(self) -> int:
        return len(self._members)
