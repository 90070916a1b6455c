"""
Game state seen by the GLD subsystem.

Only the two things the resolver needs are modelled: the match seed, which
keys the ruleset cache, and the override ruleset slot it publishes into.
"""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class GameState:
    """
    A deserialized match.

    ``override_ruleset`` stays None unless a GLD was applied; None means the
    built-in ruleset is in effect.
    """
    seed: int
    override_ruleset: Optional[Any] = None

    def set_override_ruleset(self, ruleset: Any) -> None:
        self.override_ruleset = ruleset

    @property
    def has_override(self) -> bool:
        return self.override_ruleset is not None
