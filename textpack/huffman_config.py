# filename: huffman_config.py

from dataclasses import dataclass
from pathlib import Path

DEFAULT_ENCODING = "utf-8"
COMPRESSED_SUFFIX = "-compressed.bin"
CODES_SUFFIX = "-codes.txt"


@dataclass(frozen=True)
class EncoderConfig:
    """Where the encoder reads the source text and writes its two artifacts."""

    input_path: Path
    output_path: Path
    codes_path: Path
    encoding: str = DEFAULT_ENCODING

    @classmethod
    def for_input(cls, input_path, output_path=None, codes_path=None, encoding=DEFAULT_ENCODING):
        # WarAndPeace.txt -> WarAndPeace-compressed.bin, WarAndPeace-codes.txt
        input_path = Path(input_path)
        stem = input_path.with_suffix("")
        if output_path is None:
            output_path = stem.with_name(stem.name + COMPRESSED_SUFFIX)
        if codes_path is None:
            codes_path = stem.with_name(stem.name + CODES_SUFFIX)
        return cls(input_path, Path(output_path), Path(codes_path), encoding)
