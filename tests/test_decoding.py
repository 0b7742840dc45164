import pytest

from pwnedranges.domain.decoding import (
    decode_body,
    decode_line,
    encode_binary,
    encode_text,
    split_lines,
)
from pwnedranges.domain.errors import DecodeError
from pwnedranges.domain.models import RECORD_SIZE


def test_split_keeps_terminators():
    body = b"AAA:1\r\nBBB:2\r\nCCC:3"
    assert list(split_lines(body)) == [b"AAA:1\r\n", b"BBB:2\r\n", b"CCC:3"]


def test_split_with_and_without_final_terminator_gives_same_records():
    suffixes = ["A" * 35, "B" * 35, "C" * 35]
    unterminated = "\r\n".join(f"{s}:{i}" for i, s in enumerate(suffixes)).encode()
    terminated = unterminated + b"\r\n"

    assert len(list(split_lines(terminated))) == len(list(split_lines(unterminated))) == 3
    assert list(decode_body("00000", terminated)) == list(decode_body("00000", unterminated))


def test_split_empty_body_has_no_lines():
    assert list(split_lines(b"")) == []


def test_lf_followed_by_cr_is_not_a_break():
    assert list(split_lines(b"A\n\rB\nC")) == [b"A\n\rB\n", b"C"]


def test_text_encoding_prefixes_key_and_closes_body_with_crlf():
    line = b"0" * 34 + b"1:5\r\n"

    chunk, n = encode_text("00000", line)

    assert n == 1
    assert chunk == b"00000" + line + b"\r\n"
    assert chunk.startswith(b"0" * 39 + b"1:5\r\n")
    assert len(chunk.split(b":", 1)[0]) == 40


def test_text_encoding_unterminated_body_gives_one_line_per_record():
    chunk, n = encode_text("ABCDE", b"X:1\r\nY:2")
    assert n == 2
    assert chunk == b"ABCDEX:1\r\nABCDEY:2\r\n"


def test_binary_decoding_of_single_record():
    line = b"A" * 35 + b":42\r\n"

    rec = decode_line("AAAAA", line)
    chunk, n = encode_binary("AAAAA", line)

    assert rec.hash == bytes.fromhex("A" * 40)
    assert rec.count == 42
    assert n == 1
    assert len(chunk) == RECORD_SIZE == 28
    assert chunk == bytes.fromhex("A" * 40) + (42).to_bytes(8, "big")


def test_decoded_hash_starts_with_owning_key():
    body = b"\r\n".join(f"{i:035X}:{i}".encode() for i in range(1, 50))
    for rec in decode_body("1F2E3", body):
        assert rec.hash.hex().upper().startswith("1F2E3")


def test_count_accepts_full_u64_range():
    rec = decode_line("00000", b"0" * 35 + b":" + str(2 ** 64 - 1).encode())
    assert rec.count == 2 ** 64 - 1


@pytest.mark.parametrize(
    "line",
    [
        b"G" * 35 + b":1\r\n",                  # not hex
        b"0" * 34 + b" :1\r\n",                  # whitespace inside suffix
        b"0" * 35 + b";1\r\n",                  # wrong separator
        b"0" * 20 + b":1\r\n",                  # short suffix
        b"0" * 35 + b":abc\r\n",                # non-numeric count
        b"0" * 35 + b":\r\n",                   # empty count
        b"0" * 35 + b":-3\r\n",                 # negative count
        b"0" * 35 + b":" + str(2 ** 64).encode(),  # too large
        b"\r\n",                                 # blank line
    ],
)
def test_malformed_lines_raise_decode_error(line):
    with pytest.raises(DecodeError) as info:
        decode_line("00000", line)
    assert info.value.key == "00000"
    assert info.value.line == line


def test_binary_encoding_fails_on_first_bad_line():
    body = b"0" * 35 + b":1\r\nnot-a-record\r\n"
    with pytest.raises(DecodeError):
        encode_binary("00000", body)
