# filename: huffman_bits.py

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Mapping

from huffman_errors import DecodeError, PackingOverflow, UnknownSymbol

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackedStream:
    data: bytes
    bit_count: int
    symbol_count: int

    @property
    def valid_bits_in_last_byte(self) -> int:
        if self.bit_count == 0:
            return 0
        return self.bit_count - 8 * (len(self.data) - 1)

    @property
    def padding_bits(self) -> int:
        return 8 * len(self.data) - self.bit_count


def byte_length(bit_count: int) -> int:
    return (bit_count + 7) // 8


class BitWriter:
    def __init__(self) -> None:
        self._buf = bytearray()
        self._acc = 0
        self._nbits = 0  # pending bits in _acc (0..7 between writes)
        self.bit_count = 0

    def write(self, code: int, length: int) -> None:
        """Append the low ``length`` bits of ``code``, MSB-first."""
        self._acc = (self._acc << length) | code
        self._nbits += length
        self.bit_count += length
        while self._nbits >= 8:
            self._nbits -= 8
            self._buf.append((self._acc >> self._nbits) & 0xFF)
        self._acc &= (1 << self._nbits) - 1

    def finish(self) -> bytes:
        """Left-align the pending bits into one zero-padded byte."""
        if self._nbits > 0:
            self._buf.append((self._acc << (8 - self._nbits)) & 0xFF)
            self._acc = 0
            self._nbits = 0
        return bytes(self._buf)


class BitReader:
    def __init__(self, data: bytes, bit_count: int) -> None:
        if byte_length(bit_count) > len(data):
            raise DecodeError(
                f"stream holds {len(data)} bytes but {bit_count} bits were recorded"
            )
        self.data = data
        self.bit_count = bit_count

    def __iter__(self) -> Iterator[str]:
        remaining = self.bit_count
        for byte in self.data:
            for shift in range(7, -1, -1):
                if remaining == 0:
                    return
                yield "1" if (byte >> shift) & 1 else "0"
                remaining -= 1


def pack(data: Iterable[str], codes: Mapping[str, str]) -> PackedStream:
    # Codes as (value, length) pairs so the writer shifts whole codes at once
    table = {char: (int(code, 2), len(code)) for char, code in codes.items()}
    writer = BitWriter()
    symbol_count = 0
    for position, char in enumerate(data):
        try:
            value, length = table[char]
        except KeyError:
            raise UnknownSymbol(char, position) from None
        writer.write(value, length)
        symbol_count += 1

    packed = writer.finish()
    if len(packed) != byte_length(writer.bit_count):
        raise PackingOverflow(
            f"{writer.bit_count} bits packed into {len(packed)} bytes, "
            f"expected {byte_length(writer.bit_count)}"
        )
    stream = PackedStream(packed, writer.bit_count, symbol_count)
    log.debug(
        "packed %d symbols into %d bits (%d bytes, %d padding bits)",
        symbol_count, stream.bit_count, len(packed), stream.padding_bits,
    )
    return stream


def invert_codes(codes: Mapping[str, str]) -> Dict[str, str]:
    decode_table: Dict[str, str] = {}
    for char, code in codes.items():
        if not code or set(code) - {"0", "1"}:
            raise DecodeError(f"symbol {char!r} has invalid code {code!r}")
        if code in decode_table:
            raise DecodeError(
                f"symbols {decode_table[code]!r} and {char!r} share code {code}"
            )
        decode_table[code] = char
    # Sorted order puts any code directly before the codes it prefixes
    ordered = sorted(decode_table)
    for shorter, longer in zip(ordered, ordered[1:]):
        if longer.startswith(shorter):
            raise DecodeError(f"code {shorter} is a prefix of code {longer}")
    return decode_table


def unpack(packed: PackedStream, codes: Mapping[str, str]) -> str:
    if packed.symbol_count == 0:
        if packed.bit_count:
            raise DecodeError(f"{packed.bit_count} bits recorded for zero symbols")
        return ""

    decode_table = invert_codes(codes)
    if not decode_table:
        raise DecodeError(f"{packed.symbol_count} symbols recorded but the code table is empty")
    max_len = max(len(code) for code in decode_table)
    out = []
    path = ""
    for bit in BitReader(packed.data, packed.bit_count):
        path += bit
        char = decode_table.get(path)
        if char is not None:
            out.append(char)
            path = ""
            if len(out) == packed.symbol_count:
                break
        elif len(path) >= max_len:
            raise DecodeError(f"bit sequence {path} matches no code")

    if path:
        raise DecodeError(f"stream ends inside a code: trailing bits {path}")
    if len(out) != packed.symbol_count:
        raise DecodeError(f"decoded {len(out)} symbols, expected {packed.symbol_count}")
    return "".join(out)
