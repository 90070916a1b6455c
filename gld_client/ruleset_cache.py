"""Per-match cache of resolved GLD rulesets."""

import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .trailer import Identifier, TrailerVariant


@dataclass(frozen=True)
class ResolvedRuleset:
    """
    A fetched and parsed GLD.

    ``document`` is the non-empty raw text, ``parsed`` is whatever the
    ruleset parser built from it.
    """
    variant: TrailerVariant
    identifier: Identifier
    document: str
    parsed: Any

    def __post_init__(self):
        if not self.document:
            raise ValueError("ResolvedRuleset requires a non-empty document")


class RulesetCache:
    """Stores the last resolved ruleset per game seed.

    Rewinds, replays and reloads deserialize the same match again, often
    without the trailer, so the cache is what keeps them on the mod ruleset
    without another network round trip.

    One instance is shared by every match in the process. A lock guards the
    dict so different seeds can be stored from different threads; writes for
    the same seed are last-write-wins. Entries live until clear() is called.
    """

    def __init__(self):
        """Initialize empty ruleset cache."""
        self._entries: Dict[int, ResolvedRuleset] = {}
        self._lock = threading.Lock()

    def get(self, seed: int) -> Optional[ResolvedRuleset]:
        """Return the cached ruleset for a seed, or None."""
        with self._lock:
            return self._entries.get(seed)

    def put(self, seed: int, ruleset: ResolvedRuleset) -> None:
        """Store a ruleset for a seed, replacing any earlier entry."""
        with self._lock:
            self._entries[seed] = ruleset

    def evict(self, seed: int) -> Optional[ResolvedRuleset]:
        """Remove and return the entry for a seed, if any."""
        with self._lock:
            return self._entries.pop(seed, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, seed: int) -> bool:
        with self._lock:
            return seed in self._entries

    def __repr__(self) -> str:
        return f"RulesetCache(entries={len(self)})"
