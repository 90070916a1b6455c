"""
Unit tests for gld_client/trailer.py

Covers both the untagged format deployed servers send and the tagged
format with an explicit variant byte.
"""

import logging
import pytest

from gld_client.protocol import ByteCursor, encode_int32, encode_string, GLD_MARKER, GLD_TAGGED_MARKER
from gld_client.trailer import (
    Trailer,
    TrailerDecoder,
    TrailerVariant,
    TAG_HASH_REFERENCE,
    TAG_LEGACY_VERSION,
    encode_trailer,
)

CONTENT_HASH = "abc123def4567890abc123def4567890"


# ============================================================================
# Absence
# ============================================================================


@pytest.mark.unit
def test_decode_empty_remainder_is_none(decoder, cursor_for):
    """A stream that ends exactly at end of fixed data has no trailer."""
    trailer = decoder.decode(cursor_for())
    assert trailer == Trailer.none()
    assert not trailer.present


@pytest.mark.unit
def test_decode_other_marker_is_none(decoder, cursor_for):
    cursor = cursor_for(extra=encode_string("##XYZ:") + encode_int32(1500))
    assert decoder.decode(cursor).variant is TrailerVariant.NONE


@pytest.mark.unit
def test_decode_stray_bytes_is_none(decoder, cursor_for):
    """Bytes that do not even form a string are treated as absence."""
    cursor = cursor_for(extra=b'\x90')
    assert decoder.decode(cursor).variant is TrailerVariant.NONE


@pytest.mark.unit
def test_decode_marker_prefix_is_not_recovered(decoder, cursor_for):
    """A marker with extra characters is not ours."""
    cursor = cursor_for(extra=encode_string(GLD_MARKER + "x") + encode_int32(1500))
    assert decoder.decode(cursor).variant is TrailerVariant.NONE


@pytest.mark.unit
@pytest.mark.parametrize("junk", [
    b'\x00',
    b'\x01\x02\x03',
    b'\xff\xff\xff\xff\xff\xff',
    b'\x06##GL',
    b'\x02\xff\xfe',
])
def test_decode_junk_never_raises(decoder, cursor_for, junk):
    assert decoder.decode(cursor_for(extra=junk)).variant is TrailerVariant.NONE


@pytest.mark.unit
def test_decode_truncated_legacy_trailer_is_none(decoder, blob_builder, fixed_payload):
    """Every strict prefix of a legacy trailer decodes to no trailer."""
    blob = blob_builder(Trailer.legacy(1500))
    for end in range(len(fixed_payload), len(blob)):
        cursor = ByteCursor(blob[:end], len(fixed_payload))
        assert decoder.decode(cursor).variant is TrailerVariant.NONE, f"prefix ending at {end}"


@pytest.mark.unit
def test_decode_truncated_hash_trailer_is_none(hash_only_decoder, blob_builder, fixed_payload):
    """Every strict prefix of a hash trailer decodes to no trailer."""
    blob = blob_builder(Trailer.hash_reference(CONTENT_HASH))
    for end in range(len(fixed_payload), len(blob)):
        cursor = ByteCursor(blob[:end], len(fixed_payload))
        assert hash_only_decoder.decode(cursor).variant is TrailerVariant.NONE, f"prefix ending at {end}"


# ============================================================================
# Untagged format
# ============================================================================


@pytest.mark.unit
def test_decode_untagged_legacy_version(decoder, cursor_for):
    cursor = cursor_for(Trailer.legacy(1500))
    assert decoder.decode(cursor) == Trailer(TrailerVariant.LEGACY_VERSION, 1500)
    assert cursor.remaining() == 0


@pytest.mark.unit
def test_decode_untagged_hash_reference(decoder, cursor_for):
    cursor = cursor_for(Trailer.hash_reference(CONTENT_HASH))
    assert decoder.decode(cursor) == Trailer(TrailerVariant.HASH_REFERENCE, CONTENT_HASH)


@pytest.mark.unit
def test_decode_untagged_hash_with_hash_only_decoder(hash_only_decoder, cursor_for):
    cursor = cursor_for(Trailer.hash_reference("abc123"))
    assert hash_only_decoder.decode(cursor) == Trailer.hash_reference("abc123")


@pytest.mark.unit
def test_decode_untagged_legacy_rejected_by_hash_only_decoder(hash_only_decoder, cursor_for):
    """With numeric identifiers disabled, four int32 bytes are not a valid string."""
    cursor = cursor_for(Trailer.legacy(1500))
    assert hash_only_decoder.decode(cursor).variant is TrailerVariant.NONE


@pytest.mark.unit
def test_decode_untagged_empty_hash_is_none(decoder, cursor_for):
    cursor = cursor_for(extra=encode_string(GLD_MARKER) + encode_string(""))
    assert decoder.decode(cursor).variant is TrailerVariant.NONE


@pytest.mark.unit
def test_decode_below_reserved_range_passes_through_with_warning(decoder, cursor_for, caplog):
    cursor = cursor_for(Trailer.legacy(7))
    with caplog.at_level(logging.WARNING, logger="gld_client.trailer"):
        trailer = decoder.decode(cursor)
    assert trailer == Trailer.legacy(7)
    assert "below the reserved range" in caplog.text


@pytest.mark.unit
def test_decode_hash_ignores_bytes_after_trailer(decoder, cursor_for):
    cursor = cursor_for(Trailer.hash_reference(CONTENT_HASH), extra=b'\x00\x00')
    assert decoder.decode(cursor) == Trailer.hash_reference(CONTENT_HASH)
    assert cursor.remaining() == 2


# ============================================================================
# Tagged format
# ============================================================================


@pytest.mark.unit
def test_decode_tagged_legacy_version(decoder, cursor_for):
    cursor = cursor_for(Trailer.legacy(2001), tagged=True)
    assert decoder.decode(cursor) == Trailer.legacy(2001)


@pytest.mark.unit
def test_decode_tagged_hash_reference(decoder, cursor_for):
    cursor = cursor_for(Trailer.hash_reference(CONTENT_HASH), tagged=True)
    assert decoder.decode(cursor) == Trailer.hash_reference(CONTENT_HASH)


@pytest.mark.unit
def test_decode_tagged_short_hash_is_not_mistaken_for_int(decoder, cursor_for):
    """The variant byte removes the four-byte ambiguity of the untagged form."""
    cursor = cursor_for(Trailer.hash_reference("abc"), tagged=True)
    assert decoder.decode(cursor) == Trailer.hash_reference("abc")


@pytest.mark.unit
def test_decode_tagged_legacy_rejected_by_hash_only_decoder(hash_only_decoder, cursor_for):
    cursor = cursor_for(Trailer.legacy(1500), tagged=True)
    assert hash_only_decoder.decode(cursor).variant is TrailerVariant.NONE


@pytest.mark.unit
def test_decode_tagged_unknown_variant_is_none(decoder, cursor_for):
    cursor = cursor_for(extra=encode_string(GLD_TAGGED_MARKER) + b'\x09' + encode_int32(1500))
    assert decoder.decode(cursor).variant is TrailerVariant.NONE


@pytest.mark.unit
def test_decode_tagged_missing_variant_byte_is_none(decoder, cursor_for, caplog):
    cursor = cursor_for(extra=encode_string(GLD_TAGGED_MARKER))
    with caplog.at_level(logging.WARNING, logger="gld_client.trailer"):
        assert decoder.decode(cursor).variant is TrailerVariant.NONE
    assert "Malformed GLD trailer" in caplog.text


# ============================================================================
# encode_trailer
# ============================================================================


@pytest.mark.unit
def test_encode_trailer_none_is_empty():
    assert encode_trailer(Trailer.none()) == b''


@pytest.mark.unit
def test_encode_trailer_untagged_legacy_bytes():
    assert encode_trailer(Trailer.legacy(1500)) == b'\x06##GLD:\xdc\x05\x00\x00'


@pytest.mark.unit
def test_encode_trailer_tagged_hash_bytes():
    expected = b'\x07##GLD+:' + bytes([TAG_HASH_REFERENCE]) + b'\x03abc'
    assert encode_trailer(Trailer.hash_reference("abc"), tagged=True) == expected


@pytest.mark.unit
def test_encode_trailer_tagged_legacy_uses_legacy_tag():
    encoded = encode_trailer(Trailer.legacy(1000), tagged=True)
    assert encoded[8] == TAG_LEGACY_VERSION


@pytest.mark.unit
def test_decode_untagged_legacy_followed_by_stray_byte_is_none(decoder, cursor_for):
    """Only an exact four-byte remainder is read as a legacy version."""
    cursor = cursor_for(Trailer.legacy(1500), extra=b'\x00')
    assert decoder.decode(cursor).variant is TrailerVariant.NONE
