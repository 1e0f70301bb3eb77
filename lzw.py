#!/usr/bin/env python3
"""
LZW Compression Tool (escape-coded variable width, freeze on full)

Usage:
    Compress:   python3 lzw.py compress input.bin output.lzw
                python3 lzw.py compress input.bin > output.lzw
    Decompress: python3 lzw.py decompress input.lzw output.bin

Options:
    --max-bits N        Largest code word width, 9-20 (default 20). The same
                        value must be given to decompress.
    --dictionary KIND   'tree' (default) or 'hash'. Output is identical,
                        only encoding speed differs.
    --debug             Trace codes, dictionary additions and width changes
                        on standard error.
"""

import sys
import argparse

import lzw_encode
from lzw_decode import decompress
from lzw_encode import DICTIONARY_KINDS, MAX_CODE_LEN, MIN_CODE_LEN, compress

def max_bits_arg(text):
    value = int(text)
    if not MIN_CODE_LEN <= value <= MAX_CODE_LEN:
        raise argparse.ArgumentTypeError(f"must be between {MIN_CODE_LEN} and {MAX_CODE_LEN}")
    return value

def build_parser():
    parser = argparse.ArgumentParser(description='LZW compression (escape-coded widths, freeze mode)')
    sub = parser.add_subparsers(dest='mode', required=True)

    # Compress subcommand
    c = sub.add_parser('compress')
    c.add_argument('input')
    c.add_argument('output', nargs='?', default=None,
                   help='Output file (standard output when omitted)')
    c.add_argument('--max-bits', type=max_bits_arg, default=MAX_CODE_LEN)
    c.add_argument('--dictionary', choices=DICTIONARY_KINDS, default='tree')
    c.add_argument('--debug', action='store_true', help='Enable debug output')

    # Decompress subcommand
    d = sub.add_parser('decompress')
    d.add_argument('input')
    d.add_argument('output')
    d.add_argument('--max-bits', type=max_bits_arg, default=MAX_CODE_LEN)
    d.add_argument('--debug', action='store_true', help='Enable debug output')

    return parser

def main(argv=None):
    """Parse command-line arguments and run compression or decompression."""
    args = build_parser().parse_args(argv)

    # Set global debug flag
    lzw_encode.DEBUG = args.debug

    try:
        if args.mode == 'compress':
            stats = compress(args.input, args.output, args.max_bits, args.dictionary)
            if args.output is not None:
                print(f"Compressed: {args.input} -> {args.output} "
                      f"({stats.bytes_read} bytes, {stats.codes_written} codes, "
                      f"{stats.final_width}-bit)")
        else:
            written = decompress(args.input, args.output, args.max_bits)
            print(f"Decompressed: {args.input} -> {args.output} ({written} bytes)")
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.debug:
            import traceback
            traceback.print_exc()
        return 1
    return 0

if __name__ == '__main__':
    sys.exit(main())
