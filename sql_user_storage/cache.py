"""Per-provider cache of users that passed credential validation."""
from sql_user_storage.models import Identity


class IdentityCache:

    """Username to identity map owned by a single provider instance.

    Entries are never evicted; the cache lives as long as its provider and is
    cleared when the provider is closed. Not thread-safe: a provider instance is
    used from one thread at a time.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Identity] = {}

    def get(self, username: str) -> Identity | None:
        return self._entries.get(username)

    def put(self, identity: Identity) -> None:
        self._entries[identity.username] = identity

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, username: str) -> bool:
        return username in self._entries

    def __len__(self) -> int:
        return len(self._entries)
