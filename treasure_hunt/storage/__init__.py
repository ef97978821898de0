"""
Durable stores backing teams, progress and clues
"""
from treasure_hunt.storage.base import HuntStore
from treasure_hunt.storage.memory import MemoryStore

__all__ = ["HuntStore", "MemoryStore"]
