"""
Detection and decoding of the GLD trailer.

The server appends the trailer directly after the fixed-format game state:

    untagged:  STRING "##GLD:"  + (INT32 version | STRING hash)
    tagged:    STRING "##GLD+:" + UINT8 variant + (INT32 version | STRING hash)

The untagged form is what deployed servers send. Its variant is inferred:
exactly four bytes after the marker means a legacy version number, anything
else is read as a hash string. Earlier clients read the int32 whenever
four or more bytes followed; requiring exactly four is a deliberate
narrowing, so a legacy trailer followed by stray bytes is not recognized.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .errors import TruncatedError
from .protocol import (
    ByteCursor,
    GLD_MARKER,
    GLD_TAGGED_MARKER,
    MOD_GLD_VERSION_MIN,
    encode_int32,
    encode_string,
    encode_uint8,
)

logger = logging.getLogger(__name__)

# Discriminator bytes used after GLD_TAGGED_MARKER
TAG_LEGACY_VERSION = 0x01
TAG_HASH_REFERENCE = 0x02

LEGACY_IDENTIFIER_SIZE = 4

Identifier = Union[int, str]


class TrailerVariant(Enum):
    NONE = "none"
    LEGACY_VERSION = "legacy_version"
    HASH_REFERENCE = "hash_reference"


@dataclass(frozen=True)
class Trailer:
    """Decoded trailer. ``identifier`` is None only for TrailerVariant.NONE."""
    variant: TrailerVariant
    identifier: Optional[Identifier] = None

    @classmethod
    def none(cls) -> 'Trailer':
        return cls(TrailerVariant.NONE)

    @classmethod
    def legacy(cls, version: int) -> 'Trailer':
        return cls(TrailerVariant.LEGACY_VERSION, version)

    @classmethod
    def hash_reference(cls, content_hash: str) -> 'Trailer':
        return cls(TrailerVariant.HASH_REFERENCE, content_hash)

    @property
    def present(self) -> bool:
        return self.variant is not TrailerVariant.NONE


class TrailerDecoder:
    """
    Decodes the optional trailer that follows a fixed-format game state.

    decode() never raises for anything found in the byte stream. Absence,
    foreign bytes and malformed trailers all come back as Trailer.none().
    """

    def __init__(self, accept_numeric: bool = True):
        """
        Args:
            accept_numeric: Whether legacy integer identifiers are honoured.
                Hash-only deployments set this to False.
        """
        self.accept_numeric = accept_numeric

    def decode(self, cursor: ByteCursor) -> Trailer:
        remaining = cursor.remaining()
        if remaining == 0:
            logger.debug("No trailing data after game state")
            return Trailer.none()

        logger.debug(f"Found {remaining} bytes of trailing data at offset {cursor.position}")

        try:
            marker = cursor.read_length_prefixed_string()
        except TruncatedError as e:
            logger.debug(f"Trailing bytes do not form a marker string: {e}")
            return Trailer.none()

        if marker not in (GLD_MARKER, GLD_TAGGED_MARKER):
            logger.debug(f"Marker mismatch - expected '{GLD_MARKER}', got '{marker}'")
            return Trailer.none()

        try:
            if marker == GLD_TAGGED_MARKER:
                trailer = self._decode_tagged(cursor)
            else:
                trailer = self._decode_untagged(cursor)
        except TruncatedError as e:
            logger.warning(f"Malformed GLD trailer after marker '{marker}': {e}")
            return Trailer.none()

        if trailer.present and cursor.remaining():
            logger.debug(f"Ignoring {cursor.remaining()} bytes after GLD trailer")
        return trailer

    def _decode_tagged(self, cursor: ByteCursor) -> Trailer:
        tag = cursor.read_uint8()
        if tag == TAG_LEGACY_VERSION:
            version = cursor.read_int32()
            if not self.accept_numeric:
                logger.warning(f"Rejecting numeric GLD identifier {version}: numeric identifiers are disabled")
                return Trailer.none()
            return self._legacy(version)
        if tag == TAG_HASH_REFERENCE:
            return self._hash(cursor.read_length_prefixed_string())
        logger.warning(f"Unknown GLD trailer variant tag 0x{tag:02x}")
        return Trailer.none()

    def _decode_untagged(self, cursor: ByteCursor) -> Trailer:
        # Deployed servers send either exactly one INT32 or one STRING
        if self.accept_numeric and cursor.remaining() == LEGACY_IDENTIFIER_SIZE:
            return self._legacy(cursor.read_int32())
        return self._hash(cursor.read_length_prefixed_string())

    def _legacy(self, version: int) -> Trailer:
        if version < MOD_GLD_VERSION_MIN:
            logger.warning(
                f"ModGldVersion {version} is below the reserved range "
                f"(>= {MOD_GLD_VERSION_MIN}); using it anyway"
            )
        logger.info(f"Found embedded ModGldVersion: {version}")
        return Trailer.legacy(version)

    def _hash(self, content_hash: str) -> Trailer:
        if not content_hash:
            logger.warning("GLD trailer carries an empty hash identifier")
            return Trailer.none()
        logger.info(f"Found embedded GLD hash: {content_hash}")
        return Trailer.hash_reference(content_hash)


def encode_trailer(trailer: Trailer, tagged: bool = False) -> bytes:
    """
    Encode a trailer the way the server appends it.

    Returns b'' for TrailerVariant.NONE.
    """
    if trailer.variant is TrailerVariant.NONE:
        return b''

    if trailer.variant is TrailerVariant.LEGACY_VERSION:
        body = encode_int32(trailer.identifier)
        tag = TAG_LEGACY_VERSION
    else:
        body = encode_string(trailer.identifier)
        tag = TAG_HASH_REFERENCE

    if tagged:
        return encode_string(GLD_TAGGED_MARKER) + encode_uint8(tag) + body
    return encode_string(GLD_MARKER) + body
