"""
Post-deserialization hook that applies a server-supplied GLD.

Called once per game-state deserialization with the cursor left where the
fixed-format reader stopped. The flow per call is:

    decode trailer -> probe cache by seed -> fetch on miss -> parse
    -> store in cache -> publish onto the game state

A failure at any step leaves the built-in ruleset in effect. The match
always loads.
"""

import logging
from enum import Enum
from typing import Any, Callable, Optional, Tuple

from .capture import TrailerCapture
from .errors import RulesetParseError
from .game_state import GameState
from .protocol import ByteCursor
from .resolver import FetchOutcome, ModResolver
from .ruleset import parse_gld_document
from .ruleset_cache import ResolvedRuleset, RulesetCache
from .trailer import Trailer, TrailerDecoder

logger = logging.getLogger(__name__)


class ResolutionOutcome(Enum):
    NO_OVERRIDE = "no_override"        # no trailer and nothing cached
    CACHED = "cached"                  # served from the ruleset cache
    RESOLVED = "resolved"              # fetched, parsed and cached
    RESOLVE_FAILED = "resolve_failed"  # fetch or parse failed


class ResolutionOrchestrator:
    """
    Ties trailer decoding, the ruleset cache and the resolver together.

    The cache is passed in so one instance can be shared by every match in
    the process.
    """

    def __init__(
        self,
        cache: RulesetCache,
        resolver: ModResolver,
        base_url: str,
        decoder: Optional[TrailerDecoder] = None,
        parser: Callable[[str], Any] = parse_gld_document,
        capture: Optional[TrailerCapture] = None,
    ):
        self.cache = cache
        self.resolver = resolver
        self.base_url = base_url
        self.decoder = decoder if decoder is not None else TrailerDecoder()
        self.parser = parser
        self._capture = capture

    def process(self, cursor: ByteCursor, game_state: GameState) -> ResolutionOutcome:
        """
        Apply a GLD override to game_state if the blob or cache provides one.

        Never raises; failures are logged and reported as RESOLVE_FAILED.
        """
        try:
            outcome, trailer = self._probe(cursor, game_state)
            if outcome is not None:
                return outcome
            fetch = self.resolver.resolve(self.base_url, trailer.variant, trailer.identifier)
            return self._complete(game_state, trailer, fetch)
        except Exception:
            logger.exception("Unexpected error while applying GLD; keeping built-in ruleset")
            return ResolutionOutcome.RESOLVE_FAILED

    async def process_async(self, cursor: ByteCursor, game_state: GameState) -> ResolutionOutcome:
        """Same as process(), with the fetch run on a worker thread."""
        try:
            outcome, trailer = self._probe(cursor, game_state)
            if outcome is not None:
                return outcome
            fetch = await self.resolver.resolve_async(self.base_url, trailer.variant, trailer.identifier)
            return self._complete(game_state, trailer, fetch)
        except Exception:
            logger.exception("Unexpected error while applying GLD; keeping built-in ruleset")
            return ResolutionOutcome.RESOLVE_FAILED

    def _probe(self, cursor: ByteCursor, game_state: GameState) -> Tuple[Optional[ResolutionOutcome], Trailer]:
        """
        Decode the trailer and consult the cache.

        Returns a terminal outcome, or (None, trailer) when a fetch is needed.
        """
        seed = game_state.seed
        if cursor.remaining():
            self._capture_trailer(cursor.rest(), seed)

        trailer = self.decoder.decode(cursor)
        cached = self.cache.get(seed)

        if not trailer.present:
            if cached is None:
                logger.debug(f"No GLD trailer and nothing cached for Seed={seed}")
                return ResolutionOutcome.NO_OVERRIDE, trailer
            game_state.set_override_ruleset(cached.parsed)
            logger.info(f"Applied cached GLD for Seed={seed}, identifier={cached.identifier}")
            return ResolutionOutcome.CACHED, trailer

        if cached is not None:
            if (cached.variant, cached.identifier) == (trailer.variant, trailer.identifier):
                game_state.set_override_ruleset(cached.parsed)
                logger.info(f"Applied cached GLD for Seed={seed}, identifier={cached.identifier}")
                return ResolutionOutcome.CACHED, trailer
            logger.info(
                f"GLD identifier for Seed={seed} changed from {cached.identifier} "
                f"to {trailer.identifier}; resolving again"
            )
            self.cache.evict(seed)

        return None, trailer

    def _complete(self, game_state: GameState, trailer: Trailer, fetch: FetchOutcome) -> ResolutionOutcome:
        if not fetch.is_ok:
            logger.error(f"Failed to fetch GLD for identifier {trailer.identifier}: {fetch.kind.value}")
            return ResolutionOutcome.RESOLVE_FAILED

        self._capture_document(fetch.document, trailer.identifier)

        logger.debug(f"Parsing GLD document ({len(fetch.document)} chars)")
        try:
            parsed = self.parser(fetch.document)
        except RulesetParseError as e:
            logger.error(f"Failed to parse GLD for identifier {trailer.identifier}: {e}")
            return ResolutionOutcome.RESOLVE_FAILED
        except Exception:
            logger.exception(f"Ruleset parser raised for identifier {trailer.identifier}")
            return ResolutionOutcome.RESOLVE_FAILED

        seed = game_state.seed
        self.cache.put(seed, ResolvedRuleset(trailer.variant, trailer.identifier, fetch.document, parsed))
        game_state.set_override_ruleset(parsed)
        logger.info(f"Applied GLD {trailer.identifier}, cached for Seed={seed}")
        return ResolutionOutcome.RESOLVED

    def _capture_trailer(self, raw_bytes: bytes, seed: int) -> None:
        if self._capture is None:
            return
        try:
            self._capture.write_trailer(raw_bytes, seed)
        except (OSError, RuntimeError) as e:
            logger.warning(f"Could not capture trailer for Seed={seed}: {e}")

    def _capture_document(self, document: str, identifier) -> None:
        if self._capture is None:
            return
        try:
            self._capture.write_document(document, identifier)
        except (OSError, RuntimeError) as e:
            logger.warning(f"Could not capture GLD document {identifier}: {e}")
