"""Tests for the envelope wire grammar (no cryptography involved)."""
import base64

import pytest

import licseal
from licseal import Chunked, DecryptError, EnvelopeFormatError, ErrorKind, SingleBlock

BLOCK = 256  # RSA-2048


def _b64(n: int) -> str:
    return base64.b64encode(bytes(n)).decode("ascii")


def test_single_block_bound_for_2048_bit_keys():
    assert licseal.max_single_block_chars(BLOCK) == 400
    assert len(_b64(BLOCK)) == 344


def test_plain_base64_parses_as_single_block():
    block = _b64(BLOCK)
    assert licseal.parse_envelope(block, BLOCK) == SingleBlock(block)


def test_notchunk_prefix_takes_single_block_path():
    parsed = licseal.parse_envelope("NOTCHUNK:2:a|b", BLOCK)
    assert isinstance(parsed, SingleBlock)


def test_chunked_envelope_parses_blocks_in_order():
    parsed = licseal.parse_envelope("CHUNK:3:one|two|three", BLOCK)
    assert parsed == Chunked(("one", "two", "three"))
    assert parsed.count == 3


def test_empty_input():
    with pytest.raises(DecryptError) as exc_info:
        licseal.parse_envelope("", BLOCK)
    assert exc_info.value.kind is ErrorKind.EMPTY_INPUT
    assert not isinstance(exc_info.value, EnvelopeFormatError)


def test_single_block_length_limit():
    assert isinstance(licseal.parse_envelope("A" * 400, BLOCK), SingleBlock)
    with pytest.raises(DecryptError) as exc_info:
        licseal.parse_envelope("A" * 401, BLOCK)
    assert exc_info.value.kind is ErrorKind.INPUT_TOO_LONG
    assert exc_info.value.details == {"length": 401, "max_length": 400}


@pytest.mark.parametrize("text", ["CHUNK:", "CHUNK:1", "CHUNK:1:a:b", "CHUNK:2:a|b:c"])
def test_wrong_number_of_fields(text):
    with pytest.raises(EnvelopeFormatError) as exc_info:
        licseal.parse_envelope(text, BLOCK)
    assert exc_info.value.kind is ErrorKind.INVALID_CHUNK_FORMAT


@pytest.mark.parametrize(
    "text",
    [
        "CHUNK:abc:data",
        "CHUNK:0:",
        "CHUNK:101:x",
        "CHUNK:-1:x",
        "CHUNK: 1:x",
        "CHUNK:+1:x",
        "CHUNK::x",
        "CHUNK:0000:x",
        "CHUNK:" + "9" * 5000 + ":x",
        "CHUNK:" + "0" * 5000 + "101:x",
    ],
)
def test_invalid_chunk_count(text):
    with pytest.raises(EnvelopeFormatError) as exc_info:
        licseal.parse_envelope(text, BLOCK)
    assert exc_info.value.kind is ErrorKind.INVALID_CHUNK_COUNT


def test_leading_zeros_in_count_are_tolerated():
    assert licseal.parse_envelope("CHUNK:002:a|b", BLOCK).count == 2
    assert licseal.parse_envelope("CHUNK:" + "0" * 5000 + "2:a|b", BLOCK).count == 2


def test_count_of_one_hundred_is_accepted():
    body = "|".join(["x"] * 100)
    parsed = licseal.parse_envelope(f"CHUNK:100:{body}", BLOCK)
    assert parsed.count == 100


def test_count_mismatch_is_not_tolerated():
    with pytest.raises(EnvelopeFormatError) as exc_info:
        licseal.parse_envelope("CHUNK:2:onlyoneblock", BLOCK)
    err = exc_info.value
    assert err.kind is ErrorKind.CHUNK_COUNT_MISMATCH
    assert err.details == {"expected": 2, "actual": 1}

    with pytest.raises(EnvelopeFormatError) as exc_info:
        licseal.parse_envelope("CHUNK:1:a|b", BLOCK)
    assert exc_info.value.details == {"expected": 1, "actual": 2}


def test_empty_elements_still_count_as_blocks():
    parsed = licseal.parse_envelope("CHUNK:2:a|", BLOCK)
    assert parsed == Chunked(("a", ""))


def test_format_errors_are_decrypt_errors():
    with pytest.raises(DecryptError):
        licseal.parse_envelope("CHUNK:0:", BLOCK)


def test_parse_rejects_non_str():
    with pytest.raises(TypeError):
        licseal.parse_envelope(b"CHUNK:1:a", BLOCK)


def test_serialize_single_block_has_no_prefix():
    assert licseal.serialize_envelope(SingleBlock("abc=")) == "abc="


def test_serialize_chunked():
    text = licseal.serialize_envelope(Chunked(("a", "b", "c")))
    assert text == "CHUNK:3:a|b|c"
    assert licseal.parse_envelope(text, BLOCK) == Chunked(("a", "b", "c"))


@pytest.mark.parametrize("count", [0, 101])
def test_serialize_rejects_out_of_range_counts(count):
    with pytest.raises(ValueError):
        licseal.serialize_envelope(Chunked(tuple("x" for _ in range(count))))


def test_decode_block_checks_encoding():
    for bad in ["invalid_base64!", "a", "ab=c", "ü" * 4]:
        with pytest.raises(DecryptError) as exc_info:
            licseal.decode_block(bad, BLOCK)
        assert exc_info.value.kind is ErrorKind.INVALID_ENCODING


@pytest.mark.parametrize("size", [0, 255, 257])
def test_decode_block_checks_size(size):
    with pytest.raises(DecryptError) as exc_info:
        licseal.decode_block(_b64(size), BLOCK)
    err = exc_info.value
    assert err.kind is ErrorKind.INVALID_CIPHERTEXT_SIZE
    assert err.details == {"expected": BLOCK, "actual": size}


def test_decode_block_reports_chunk_index():
    with pytest.raises(DecryptError) as exc_info:
        licseal.decode_block(_b64(10), BLOCK, index=4)
    assert exc_info.value.details["chunk"] == 4


def test_encode_decode_block():
    data = bytes(range(256))
    assert licseal.decode_block(licseal.encode_block(data), BLOCK) == data


def test_every_kind_has_a_default_message():
    for kind in ErrorKind:
        assert str(licseal.LicsealError(kind))
    err = DecryptError(ErrorKind.INVALID_CIPHERTEXT_SIZE, expected=256, actual=255)
    assert "expected=256" in str(err)
    assert "actual=255" in str(err)


def test_size_arithmetic(public_key):
    assert licseal.block_size(public_key) == 256
    assert licseal.chunk_limit(public_key) == 245
    assert licseal.chunk_count(0, 245) == 1
    assert licseal.chunk_count(245, 245) == 1
    assert licseal.chunk_count(246, 245) == 2
    assert licseal.chunk_count(500, 245) == 3


def test_split_chunks_preserves_bytes():
    data = bytes(range(256)) * 2
    chunks = licseal.split_chunks(data, 245)
    assert [len(c) for c in chunks] == [245, 245, 22]
    assert b"".join(chunks) == data
