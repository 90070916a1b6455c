"""
Network lookup of GLD documents.

One GET per resolution against ``{base_url}/api/mods/gld/{identifier}``.
Every path returns a FetchOutcome; nothing raises past resolve().
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from urllib.parse import quote

import requests

from .trailer import Identifier, TrailerVariant

logger = logging.getLogger(__name__)

GLD_ENDPOINT = "/api/mods/gld/"
DEFAULT_TIMEOUT = 10.0


class FetchErrorKind(Enum):
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"
    TRANSPORT = "transport"
    EMPTY_BODY = "empty_body"


@dataclass(frozen=True)
class FetchOutcome:
    """Result of a single fetch: either a document or an error kind."""
    document: Optional[str] = None
    kind: Optional[FetchErrorKind] = None
    status_code: Optional[int] = None
    detail: str = ""

    @classmethod
    def ok(cls, document: str, status_code: int = 200) -> 'FetchOutcome':
        if not document:
            raise ValueError("An Ok outcome needs a non-empty document")
        return cls(document=document, status_code=status_code)

    @classmethod
    def err(cls, kind: FetchErrorKind, status_code: Optional[int] = None, detail: str = "") -> 'FetchOutcome':
        return cls(kind=kind, status_code=status_code, detail=detail)

    @property
    def is_ok(self) -> bool:
        return self.kind is None


def build_gld_url(base_url: str, variant: TrailerVariant, identifier: Identifier) -> str:
    """
    Build the lookup URL for an identifier.

    Legacy versions render as decimal; hashes are quoted as one path segment.

    Raises:
        TypeError: If base_url is not a string
        ValueError: If the variant carries no identifier
    """
    if not isinstance(base_url, str):
        raise TypeError(f"Base URL must be a string, got {type(base_url).__name__}")
    if variant is TrailerVariant.LEGACY_VERSION:
        segment = str(int(identifier))
    elif variant is TrailerVariant.HASH_REFERENCE:
        segment = quote(str(identifier), safe='')
    else:
        raise ValueError(f"Cannot build a GLD URL for variant {variant}")
    return f"{base_url.rstrip('/')}{GLD_ENDPOINT}{segment}"


def classify_response(status_code: int, body: str) -> FetchOutcome:
    """Map an HTTP status and body onto a FetchOutcome."""
    if 200 <= status_code < 300:
        if not body:
            return FetchOutcome.err(FetchErrorKind.EMPTY_BODY, status_code)
        return FetchOutcome.ok(body, status_code)
    if 400 <= status_code < 500:
        return FetchOutcome.err(FetchErrorKind.NOT_FOUND, status_code, body)
    return FetchOutcome.err(FetchErrorKind.SERVER_ERROR, status_code, body)


class ModResolver:
    """Fetches GLD documents over HTTP with a bounded timeout."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self._session = session if session is not None else requests.Session()

    def resolve(self, base_url: str, variant: TrailerVariant, identifier: Identifier) -> FetchOutcome:
        try:
            url = build_gld_url(base_url, variant, identifier)
        except (TypeError, ValueError) as e:
            logger.error(f"Cannot resolve GLD identifier {identifier!r}: {e}")
            return FetchOutcome.err(FetchErrorKind.TRANSPORT, detail=str(e))

        logger.debug(f"Requesting URL: {url}")
        try:
            response = self._session.get(url, timeout=self.timeout)
            status_code = response.status_code
            body = response.text
        except requests.RequestException as e:
            logger.error(f"GLD request to {url} failed: {type(e).__name__}: {e}")
            return FetchOutcome.err(FetchErrorKind.TRANSPORT, detail=str(e))
        except (TypeError, ValueError) as e:
            # urllib3 rejects bad timeouts and malformed hosts before connecting
            logger.error(f"GLD request to {url} could not be sent: {type(e).__name__}: {e}")
            return FetchOutcome.err(FetchErrorKind.TRANSPORT, detail=str(e))

        logger.debug(f"Response status: {status_code}")
        outcome = classify_response(status_code, body)
        if outcome.is_ok:
            logger.info(f"Fetched GLD for {identifier} ({len(outcome.document)} chars)")
        else:
            logger.error(f"GLD fetch for {identifier} failed with status {status_code} ({outcome.kind.value}): {body[:200]}")
        return outcome

    async def resolve_async(self, base_url: str, variant: TrailerVariant, identifier: Identifier) -> FetchOutcome:
        """Run resolve() on a worker thread so the event loop keeps running."""
        return await asyncio.to_thread(self.resolve, base_url, variant, identifier)

    def close(self) -> None:
        self._session.close()
