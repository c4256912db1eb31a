# filename: huffman_cli.py

import argparse
import logging
import sys

from huffman_config import DEFAULT_ENCODING, EncoderConfig
from huffman_errors import HuffmanError
from huffman_service import HuffmanService

LOGFORMAT = "%(levelname)-8s %(filename)-16s:%(lineno)-4d>> %(message)s"


def build_parser():
    parser = argparse.ArgumentParser(prog="textpack", description="Static Huffman coding for text files.")
    sub = parser.add_subparsers(dest="command", required=True)

    enc = sub.add_parser("encode", help="Compress a text file into a packed stream and a code table.")
    enc.add_argument("input", help="Source text file.")
    enc.add_argument("--output", default=None, help="Packed data file (default: <input>-compressed.bin).")
    enc.add_argument("--codes", default=None, help="Code table file (default: <input>-codes.txt).")
    enc.add_argument("--encoding", default=DEFAULT_ENCODING)
    enc.add_argument("-v", "--verbose", action="store_true")

    dec = sub.add_parser("decode", help="Rebuild the text from a packed stream and its code table.")
    dec.add_argument("data", help="Packed data file.")
    dec.add_argument("codes", help="Code table file.")
    dec.add_argument("output", help="Where to write the decoded text.")
    dec.add_argument("--encoding", default=DEFAULT_ENCODING)
    dec.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOGFORMAT,
        handlers=[logging.StreamHandler()],
    )

    service = HuffmanService()
    try:
        if args.command == "encode":
            config = EncoderConfig.for_input(args.input, args.output, args.codes, args.encoding)
            report = service.encode_file(config)
            print(f"[encode] wrote {config.output_path} and {config.codes_path}")
            print(
                f"[encode] symbols={report.symbol_count}, distinct={report.distinct_symbols}, "
                f"bits={report.bit_count}, ratio={report.compression_ratio:.3f}"
            )
        else:
            text = service.decode_file(args.data, args.codes, args.output, args.encoding)
            print(f"[decode] wrote {args.output} ({len(text)} characters)")
    except HuffmanError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
