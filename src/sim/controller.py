"""StaticController — маршрутизация выплат token → получатель."""

from typing import Dict, Optional


class StaticController:
    """Fund controller со статической таблицей vaults."""

    def __init__(self, address: str, routes: Optional[Dict[str, str]] = None):
        self._address = address
        self._routes: Dict[str, str] = dict(routes or {})

    @property
    def address(self) -> str:
        return self._address

    def set_vault(self, token: str, receiver: str) -> None:
        self._routes[token] = receiver

    def vaults(self, token: str) -> str:
        if token not in self._routes:
            raise KeyError(f"No payout route for {token}")
        return self._routes[token]
