"""
Server-supplied Game Logic Data (GLD) support for the game client.

A game-state blob may carry a trailer after its fixed-format data naming a
ruleset on the server. This package decodes that trailer, fetches and parses
the ruleset, and caches it per match seed.
"""

from .game_state import GameState
from .orchestrator import ResolutionOrchestrator, ResolutionOutcome
from .protocol import ByteCursor
from .resolver import FetchErrorKind, FetchOutcome, ModResolver
from .ruleset_cache import ResolvedRuleset, RulesetCache
from .trailer import Trailer, TrailerDecoder, TrailerVariant

__all__ = [
    "ByteCursor",
    "FetchErrorKind",
    "FetchOutcome",
    "GameState",
    "ModResolver",
    "ResolutionOrchestrator",
    "ResolutionOutcome",
    "ResolvedRuleset",
    "RulesetCache",
    "Trailer",
    "TrailerDecoder",
    "TrailerVariant",
]
