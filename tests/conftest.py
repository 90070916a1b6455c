"""
Shared pytest fixtures for GLD client tests.

This module provides reusable fixtures for:
- Component instances (RulesetCache, GameState, TrailerDecoder)
- Mocked HTTP session and responses
- Sample blobs and GLD documents
"""

import json
from typing import Callable, Optional
from unittest.mock import MagicMock

import pytest
import requests

from gld_client.game_state import GameState
from gld_client.protocol import ByteCursor
from gld_client.resolver import FetchOutcome, ModResolver
from gld_client.ruleset_cache import RulesetCache
from gld_client.trailer import Trailer, TrailerDecoder, encode_trailer

BASE_URL = "https://gld.example.test"

# Stand-in for the fixed-format part of a serialized game state
FIXED_PAYLOAD = b'\x07GameSt\x2a\x00\x00\x00\x01\x02\x03\x04'


# ============================================================================
# Component Instance Fixtures
# ============================================================================


@pytest.fixture
def ruleset_cache():
    """Fresh RulesetCache instance."""
    return RulesetCache()


@pytest.fixture
def game_state():
    """
    Fresh GameState with seed 42 and no override.

    Usage:
        def test_state(game_state):
            assert game_state.override_ruleset is None
    """
    return GameState(seed=42)


@pytest.fixture
def decoder():
    """TrailerDecoder accepting both numeric and hash identifiers."""
    return TrailerDecoder()


@pytest.fixture
def hash_only_decoder():
    """TrailerDecoder for deployments that moved to hash identifiers."""
    return TrailerDecoder(accept_numeric=False)


# ============================================================================
# HTTP Fixtures
# ============================================================================


@pytest.fixture
def make_response() -> Callable[[int, str], MagicMock]:
    """
    Build a mocked requests.Response.

    Usage:
        def test_fetch(make_response):
            response = make_response(200, '{"version": 1}')
    """
    def build(status_code: int, text: str = "") -> MagicMock:
        response = MagicMock(spec=requests.Response)
        response.status_code = status_code
        response.text = text
        return response

    return build


@pytest.fixture
def mock_session(make_response):
    """
    Mocked requests.Session whose get() returns an empty 404 by default.

    Tests set mock_session.get.return_value or side_effect as needed.
    """
    session = MagicMock(spec=requests.Session)
    session.get.return_value = make_response(404, "")
    return session


@pytest.fixture
def resolver(mock_session):
    """ModResolver wired to the mocked session."""
    return ModResolver(timeout=2.0, session=mock_session)


@pytest.fixture
def fake_resolver():
    """
    ModResolver double whose resolve() returns a preset outcome.

    Usage:
        def test_x(fake_resolver):
            fake_resolver.resolve.return_value = FetchOutcome.ok('{}')
    """
    fake = MagicMock(spec=ModResolver)
    fake.resolve.return_value = FetchOutcome.ok(json.dumps({"version": 1}))
    return fake


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def sample_gld_document() -> str:
    """A small GLD document as the server would return it."""
    return json.dumps({
        "version": 1500,
        "unitData": {"warrior": {"attack": 2, "defence": 2}},
        "techData": {"riding": {"cost": 5}},
    })


@pytest.fixture
def blob_builder() -> Callable[..., bytes]:
    """
    Build a serialized game state with an optional trailer appended.

    Usage:
        def test_decode(blob_builder):
            blob = blob_builder(Trailer.legacy(1500))
            cursor = ByteCursor(blob, len(FIXED_PAYLOAD))
    """
    def build(trailer: Optional[Trailer] = None, tagged: bool = False, extra: bytes = b'') -> bytes:
        body = encode_trailer(trailer, tagged=tagged) if trailer is not None else b''
        return FIXED_PAYLOAD + body + extra

    return build


@pytest.fixture
def cursor_for(blob_builder) -> Callable[..., ByteCursor]:
    """Build a blob and return a cursor positioned at end of fixed data."""
    def build(trailer: Optional[Trailer] = None, tagged: bool = False, extra: bytes = b'') -> ByteCursor:
        return ByteCursor(blob_builder(trailer, tagged=tagged, extra=extra), len(FIXED_PAYLOAD))

    return build


@pytest.fixture
def fixed_payload() -> bytes:
    """The fixed-format bytes every built blob starts with."""
    return FIXED_PAYLOAD


@pytest.fixture
def base_url() -> str:
    return BASE_URL
