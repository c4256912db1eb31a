# filename: huffman_service.py

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping

from huffman_bits import PackedStream, pack, unpack
from huffman_config import DEFAULT_ENCODING
from huffman_core import HuffmanLogic
from huffman_io import (
    read_code_table,
    read_packed,
    read_source,
    write_artifacts,
    write_text,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class EncodedDocument:
    packed: PackedStream
    codes: Mapping[str, str]
    frequencies: Mapping[str, int]


@dataclass(frozen=True)
class EncodeReport:
    symbol_count: int
    distinct_symbols: int
    bit_count: int
    packed_bytes: int
    source_bytes: int
    timings: Dict[str, float] = field(default_factory=dict)

    @property
    def compression_ratio(self):
        return self.source_bytes / self.packed_bytes if self.packed_bytes > 0 else 0.0

    @property
    def bits_per_symbol(self):
        return self.bit_count / self.symbol_count if self.symbol_count else 0.0


@contextmanager
def _timed(timings, stage):
    start = time.perf_counter()
    yield
    timings[stage] = (time.perf_counter() - start) * 1000.0


class HuffmanService:
    def __init__(self):
        self.logic = HuffmanLogic()

    def compress(self, data, timings=None):
        if timings is None:
            timings = {}

        with _timed(timings, "count"):
            freqs = self.logic.count_frequencies(data)
        log.info("counted frequency of %d characters in %.1f ms", len(freqs), timings["count"])

        # Empty input has no tree; it still produces a (zero-byte) packed stream
        if not freqs:
            return EncodedDocument(PackedStream(b"", 0, 0), MappingProxyType({}), MappingProxyType({}))

        with _timed(timings, "build"):
            tree = self.logic.build_tree(freqs)
            codes = self.logic.generate_codes(tree)
        log.info("built Huffman tree in %.1f ms", timings["build"])
        if len(codes) == 1:
            log.debug("single-symbol alphabet, using code %r", next(iter(codes.values())))

        with _timed(timings, "encode"):
            packed = pack(data, codes)
        log.info("encoded message in %.1f ms", timings["encode"])

        return EncodedDocument(packed, MappingProxyType(codes), MappingProxyType(dict(freqs)))

    def decompress(self, document):
        return unpack(document.packed, document.codes)

    def encode_file(self, config):
        timings = {}
        with _timed(timings, "read"):
            text = read_source(config.input_path, config.encoding)

        document = self.compress(text, timings)

        with _timed(timings, "write"):
            written = write_artifacts(
                config.output_path, document.packed, config.codes_path, document.codes,
            )
        log.info(
            "encoded message written to file with %d bytes in %.1f ms",
            written, timings["write"],
        )

        return EncodeReport(
            symbol_count=document.packed.symbol_count,
            distinct_symbols=len(document.codes),
            bit_count=document.packed.bit_count,
            packed_bytes=len(document.packed.data),
            source_bytes=len(text.encode(config.encoding)),
            timings=timings,
        )

    def decode_file(self, data_path, codes_path, output_path, encoding=DEFAULT_ENCODING):
        packed = read_packed(data_path)
        codes = read_code_table(codes_path)
        text = unpack(packed, codes)
        write_text(output_path, text, encoding)
        log.info("decoded %d characters into %s", len(text), output_path)
        return text
