# filename: huffman_io.py

import logging
import os
import stat
import struct
import tempfile
from contextlib import contextmanager
from pathlib import Path

from huffman_bits import PackedStream, byte_length
from huffman_errors import DecodeError, IOFailure, InvalidInput

log = logging.getLogger(__name__)

MAGIC = b"HUFP"   # 4 bytes
VERSION = 1       # 1 byte

# Header (little-endian):
# magic(4) version(1) symbol_count(u64) bit_count(u64)
HEADER_FMT = "<4sBQQ"
HEADER_SIZE = struct.calcsize(HEADER_FMT)


def read_source(path, encoding="utf-8"):
    try:
        # newline="" keeps \r\n and lone \r exactly as stored
        with open(path, "r", encoding=encoding, newline="") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError, LookupError) as exc:
        raise InvalidInput(f"cannot read source text {path}: {exc}") from exc
    log.debug("read %d characters from %s", len(text), path)
    return text


def _target_mode(path):
    # Keep an existing artifact's mode; otherwise what a plain open() would give
    try:
        return stat.S_IMODE(os.stat(path).st_mode)
    except FileNotFoundError:
        mask = os.umask(0)
        os.umask(mask)
        return 0o666 & ~mask


def _discard(tmp_name):
    try:
        os.unlink(tmp_name)
    except FileNotFoundError:
        pass


class ArtifactBatch:
    """Temporary siblings of one or more artifacts, moved into place together.

    Nothing reaches the target paths until every file of the batch has been
    written completely, so a failure never leaves a half-updated set.
    """

    def __init__(self):
        self._staged = []

    @contextmanager
    def open(self, path, mode, **kwargs):
        path = Path(path)
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        except OSError as exc:
            raise IOFailure(f"cannot create {path}: {exc}") from exc
        self._staged.append((tmp_name, path))
        try:
            with os.fdopen(fd, mode, **kwargs) as f:
                yield f
        except OSError as exc:
            raise IOFailure(f"cannot write {path}: {exc}") from exc

    def commit(self):
        try:
            for tmp_name, path in self._staged:
                os.chmod(tmp_name, _target_mode(path))
            for tmp_name, path in self._staged:
                os.replace(tmp_name, path)
        except OSError as exc:
            raise IOFailure(f"cannot move artifacts into place: {exc}") from exc
        finally:
            self.discard()

    def discard(self):
        for tmp_name, _ in self._staged:
            _discard(tmp_name)
        self._staged = []


@contextmanager
def artifact_batch():
    batch = ArtifactBatch()
    try:
        yield batch
    except BaseException:
        batch.discard()
        raise
    batch.commit()


@contextmanager
def atomic_writer(path, mode, **kwargs):
    with artifact_batch() as batch:
        with batch.open(path, mode, **kwargs) as f:
            yield f


def _write_packed_body(f, packed):
    f.write(struct.pack(HEADER_FMT, MAGIC, VERSION, packed.symbol_count, packed.bit_count))
    f.write(packed.data)
    return HEADER_SIZE + len(packed.data)


def write_packed(path, packed):
    with atomic_writer(path, "wb") as f:
        return _write_packed_body(f, packed)


def read_packed(path):
    try:
        with open(path, "rb") as f:
            header = f.read(HEADER_SIZE)
            data = f.read()
    except OSError as exc:
        raise IOFailure(f"cannot read {path}: {exc}") from exc

    if len(header) != HEADER_SIZE:
        raise DecodeError("Malformed stream: header too short")
    magic, ver, symbol_count, bit_count = struct.unpack(HEADER_FMT, header)
    if magic != MAGIC:
        raise DecodeError("Bad magic number (not a packed Huffman stream)")
    if ver != VERSION:
        raise DecodeError(f"Unsupported version: {ver}")
    if len(data) != byte_length(bit_count):
        raise DecodeError(
            f"Malformed stream: {len(data)} payload bytes for {bit_count} bits"
        )
    if bit_count < symbol_count:
        raise DecodeError(f"Malformed stream: {bit_count} bits cannot hold {symbol_count} symbols")
    return PackedStream(data, bit_count, symbol_count)


def format_symbol(char):
    # unicode_escape keeps \n, \r, \t and backslash on a single line
    return char.encode("unicode_escape").decode("ascii")


def parse_symbol(field):
    return field.encode("ascii").decode("unicode_escape")


def _write_code_table_body(f, codes):
    lines = [f"{format_symbol(char)}:{codes[char]}\n" for char in sorted(codes)]
    f.writelines(lines)
    return len(lines)


def write_code_table(path, codes):
    with atomic_writer(path, "w", encoding="utf-8", newline="\n") as f:
        return _write_code_table_body(f, codes)


def write_artifacts(packed_path, packed, codes_path, codes):
    """Write the packed data file and its code table as one unit."""
    with artifact_batch() as batch:
        with batch.open(packed_path, "wb") as f:
            written = _write_packed_body(f, packed)
        with batch.open(codes_path, "w", encoding="utf-8", newline="\n") as f:
            _write_code_table_body(f, codes)
    return written


def read_code_table(path):
    try:
        with open(path, "r", encoding="utf-8", newline="\n") as f:
            lines = f.read().split("\n")
    except OSError as exc:
        raise IOFailure(f"cannot read {path}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise DecodeError(f"{path}: code table is not UTF-8 text") from exc

    codes = {}
    for lineno, line in enumerate(lines, 1):
        if not line:
            continue
        field, sep, code = line.rpartition(":")
        if not sep or not code or set(code) - {"0", "1"}:
            raise DecodeError(f"{path}:{lineno}: malformed code table line {line!r}")
        try:
            char = parse_symbol(field)
        except (UnicodeError, ValueError) as exc:
            raise DecodeError(f"{path}:{lineno}: bad symbol field {field!r}") from exc
        if len(char) != 1:
            raise DecodeError(f"{path}:{lineno}: symbol field {field!r} is not one character")
        if char in codes:
            raise DecodeError(f"{path}:{lineno}: duplicate entry for {char!r}")
        codes[char] = code
    return codes


def write_text(path, text, encoding="utf-8"):
    try:
        payload = text.encode(encoding)
    except UnicodeEncodeError as exc:
        raise IOFailure(f"cannot encode decoded text as {encoding}: {exc}") from exc
    with atomic_writer(path, "wb") as f:
        f.write(payload)
