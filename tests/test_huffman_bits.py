import os
import sys
import random
import pytest

TEXTPACK = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'textpack'))
if TEXTPACK not in sys.path:
	sys.path.insert(0, TEXTPACK)

from huffman_bits import BitReader, BitWriter, PackedStream, invert_codes, pack, unpack
from huffman_errors import DecodeError, UnknownSymbol


def test_bit_writer_msb_first_with_padding():
	writer = BitWriter()
	writer.write(0b1, 1)
	writer.write(0b01, 2)
	assert writer.finish() == bytes([0b10100000])
	assert writer.bit_count == 3


def test_bit_writer_code_spanning_bytes():
	writer = BitWriter()
	writer.write(0b111, 3)
	writer.write(0b0000011111, 10)
	assert writer.finish() == bytes([0b11100000, 0b11111000])
	assert writer.bit_count == 13


def test_bit_writer_exact_byte_has_no_padding_byte():
	writer = BitWriter()
	for _ in range(8):
		writer.write(1, 1)
	assert writer.finish() == b"\xff"


def test_bit_reader_stops_at_bit_count():
	bits = "".join(BitReader(bytes([0b10110000]), 4))
	assert bits == "1011"


def test_bit_reader_rejects_short_data():
	with pytest.raises(DecodeError):
		BitReader(b"\x00", 9)


@pytest.mark.parametrize("total_bits", range(1, 25))
def test_byte_count_is_ceil_of_bits(total_bits):
	packed = pack("a" * total_bits, {"a": "1"})
	assert len(packed.data) == (total_bits + 7) // 8
	assert 1 <= packed.valid_bits_in_last_byte <= 8
	assert packed.padding_bits == 8 * len(packed.data) - total_bits
	assert unpack(packed, {"a": "1"}) == "a" * total_bits


def test_pack_empty_input():
	packed = pack("", {"a": "0"})
	assert packed == PackedStream(b"", 0, 0)
	assert packed.valid_bits_in_last_byte == 0
	assert unpack(packed, {}) == ""


def test_pack_unknown_symbol():
	with pytest.raises(UnknownSymbol) as excinfo:
		pack("abz", {"a": "0", "b": "1"})
	assert excinfo.value.symbol == "z"
	assert excinfo.value.position == 2


def test_padding_not_misread_as_symbols():
	# "a" has a one-bit zero code, so the seven padding zeros would decode as "a"
	codes = {"a": "0", "b": "10", "c": "11"}
	packed = pack("b", codes)
	assert packed.data == bytes([0b10000000])
	assert unpack(packed, codes) == "b"


def test_roundtrip_random_codes():
	codes = {"a": "0", "b": "100", "c": "101", "d": "110", "e": "111"}
	rng = random.Random(7)
	for n in range(1, 40):
		text = "".join(rng.choice("abcde") for _ in range(n))
		packed = pack(text, codes)
		assert packed.symbol_count == n
		assert unpack(packed, codes) == text


def test_unpack_incomplete_trailing_code():
	codes = {"a": "0", "b": "10", "c": "11"}
	packed = PackedStream(bytes([0b01000000]), 2, 2)
	with pytest.raises(DecodeError):
		unpack(packed, codes)


def test_unpack_symbol_count_too_high():
	codes = {"a": "0", "b": "1"}
	packed = PackedStream(bytes([0b01000000]), 2, 3)
	with pytest.raises(DecodeError):
		unpack(packed, codes)


def test_unpack_unmatched_path():
	codes = {"a": "00", "b": "01"}
	packed = PackedStream(bytes([0b10000000]), 2, 1)
	with pytest.raises(DecodeError):
		unpack(packed, codes)


def test_unpack_bits_for_zero_symbols():
	with pytest.raises(DecodeError):
		unpack(PackedStream(b"\x00", 3, 0), {"a": "0"})


def test_invert_codes_rejects_prefix():
	with pytest.raises(DecodeError):
		invert_codes({"a": "0", "b": "01"})


def test_invert_codes_rejects_duplicates_and_bad_bits():
	with pytest.raises(DecodeError):
		invert_codes({"a": "01", "b": "01"})
	with pytest.raises(DecodeError):
		invert_codes({"a": ""})
	with pytest.raises(DecodeError):
		invert_codes({"a": "02"})
