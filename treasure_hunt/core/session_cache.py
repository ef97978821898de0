"""
Browser-scoped session cache

Holds the team name and group (and, in the local progress variant only, the
locally tracked position). Changes are recorded so the API layer can mirror
them onto cookies.
"""
from typing import Dict, Mapping, Optional, Set


TEAM_KEY = "teamName"
GROUP_KEY = "groupName"
PROGRESS_KEY = "clueProgress"

KEYS = (TEAM_KEY, GROUP_KEY, PROGRESS_KEY)


class SessionCache:

    def __init__(self, initial: Optional[Mapping[str, str]] = None):
        self._data: Dict[str, str] = {
            key: value for key, value in (initial or {}).items() if key in KEYS and value
        }
        self.updated: Set[str] = set()
        self.removed: Set[str] = set()

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self.updated.add(key)
        self.removed.discard(key)

    def remove(self, key: str) -> None:
        if key not in self._data:
            return
        del self._data[key]
        self.removed.add(key)
        self.updated.discard(key)

    def items(self) -> Dict[str, str]:
        return dict(self._data)

    def pending_changes(self) -> Dict[str, Optional[str]]:
        """key -> new value, None for removals; clears the change log"""
        changes: Dict[str, Optional[str]] = {key: self._data[key] for key in self.updated}
        changes.update({key: None for key in self.removed})
        self.updated.clear()
        self.removed.clear()
        return changes
