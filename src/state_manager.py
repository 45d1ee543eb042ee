from typing import Dict

from models import ClientAccount


class StateManager:
    """
    In-memory table of client accounts keyed by client id.
    Each account owns the deposits that can later be disputed.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        """Return all accounts (for final output)."""
        return dict(self._accounts)
