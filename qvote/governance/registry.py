"""
Voter Registry

Flat allow-list of accounts permitted to propose, vote and claim.
Registration is permanent.
"""

from typing import Dict, List

from ..exceptions import AlreadyRegisteredError, NotRegisteredError
from ..logger import get_logger

logger = get_logger(__name__)


class VoterRegistry:
    """Allow-list of registered voters."""

    def __init__(self):
        self._accounts: Dict[str, bool] = {}

    def register(self, account: str) -> None:
        """
        Add *account* to the registry.

        Raises AlreadyRegisteredError if it is already present.
        """
        if account in self._accounts:
            raise AlreadyRegisteredError(f"{account} is already registered")
        self._accounts[account] = True
        logger.info(f"VoterRegistered account={account}")

    def is_registered(self, account: str) -> bool:
        return self._accounts.get(account, False)

    def ensure_registered(self, account: str) -> None:
        if not self.is_registered(account):
            raise NotRegisteredError(f"{account} is not a registered voter")

    def accounts(self) -> List[str]:
        return list(self._accounts)

    def __contains__(self, account: str) -> bool:
        return self.is_registered(account)

    def __len__(self) -> int:
        return len(self._accounts)

    def __repr__(self) -> str:
        return f"<VoterRegistry voters={len(self._accounts)}>"
