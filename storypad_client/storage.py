"""
Browser-storage equivalent for the client session state.

Values are strings stored under fixed keys, the same shape the web client
keeps in localStorage, so state written by one implementation can be read
by the other:

    token              access token
    refreshToken       refresh token
    tokenExpiresAt     ISO-8601 access token expiry
    refreshExpiresAt   ISO-8601 refresh token expiry
    sessionExpiresAt   ISO-8601 absolute session deadline
    maxSessionDuration session window as issued ("24h", "30d")
    user               JSON-encoded user profile
    username           profile username
    userId             profile id
"""

import json
from pathlib import Path
from typing import Dict, Iterator, Optional, Union

TOKEN_KEY = "token"
REFRESH_TOKEN_KEY = "refreshToken"
TOKEN_EXPIRES_AT_KEY = "tokenExpiresAt"
REFRESH_EXPIRES_AT_KEY = "refreshExpiresAt"
SESSION_EXPIRES_AT_KEY = "sessionExpiresAt"
MAX_SESSION_DURATION_KEY = "maxSessionDuration"
USER_KEY = "user"
USERNAME_KEY = "username"
USER_ID_KEY = "userId"


class MemoryStorage:
    """localStorage-like string store held in memory."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._items: Dict[str, str] = {}
        for key, value in (initial or {}).items():
            self._items[key] = str(value)

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value) -> None:
        self._items[key] = str(value)
        self._persist()

    def remove_item(self, key: str) -> None:
        if self._items.pop(key, None) is not None:
            self._persist()

    def clear(self) -> None:
        self._items.clear()
        self._persist()

    def keys(self) -> Iterator[str]:
        return iter(list(self._items))

    def __contains__(self, key: str) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)

    def _persist(self) -> None:
        pass


class FileStorage(MemoryStorage):
    """MemoryStorage mirrored to a JSON file after every write."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        initial = {}
        if self.path.exists():
            with self.path.open("r", encoding="utf-8") as fh:
                initial = json.load(fh)
        super().__init__(initial)

    def _persist(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as fh:
            json.dump(self._items, fh, indent=2)
        tmp_path.replace(self.path)
