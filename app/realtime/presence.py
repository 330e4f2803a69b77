# app/realtime/presence.py

from enum import Enum
from typing import Dict, List, Optional, Union

UserId = Union[str, int]


class Registration(str, Enum):
    NEW = "new"
    RECONNECTED = "reconnected"
    UNCHANGED = "unchanged"


class PresenceRegistry:
    """
    Live user id -> connection id map for one realtime server.

    A user holds at most one connection id. Registering a new connection for
    a known user replaces the old id (the old socket is left to time out on
    its own).
    """

    def __init__(self):
        self._connections: Dict[str, str] = {}

    @staticmethod
    def _key(user_id: UserId) -> str:
        return str(user_id)

    def register(self, user_id: UserId, connection_id: str) -> Registration:
        key = self._key(user_id)
        current = self._connections.get(key)

        if current == connection_id:
            return Registration.UNCHANGED

        self._connections[key] = connection_id
        return Registration.NEW if current is None else Registration.RECONNECTED

    def remove_connection(self, connection_id: str) -> Optional[str]:
        """
        Drops the first entry mapped to ``connection_id`` and returns its user
        id. Assumes a connection id belongs to a single user; if two users
        ever shared one, only the first would be removed.
        """
        for user_id, sid in self._connections.items():
            if sid == connection_id:
                del self._connections[user_id]
                return user_id
        return None

    def connection_for(self, user_id: UserId) -> Optional[str]:
        return self._connections.get(self._key(user_id))

    def is_online(self, user_id: UserId) -> bool:
        return self._key(user_id) in self._connections

    def online_users(self) -> List[str]:
        return list(self._connections)

    def __len__(self) -> int:
        return len(self._connections)
