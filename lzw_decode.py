#!/usr/bin/env python3
"""
LZW Decoder for streams written by lzw_encode.

Mirrors the encoder: starts reading 9-bit code words, grows the width by one
bit whenever it reads the all-ones escape value (below max_bits), and
rebuilds the dictionary in the same order the encoder assigned codes.
There is no end-of-stream marker; decoding stops when the input runs out.
"""

import io

from bitfile import BitReader
from lzw_encode import (FIRST_CODE, LZWError, MAX_CODE_LEN, MIN_CODE_LEN,
                        OpenFailureError, _check_max_bits, debug_print)

class CorruptStreamError(LZWError):
    """Code stream cannot have been produced by the encoder."""

class LZWDecoder:
    """Decodes one code stream per decode() call."""

    def __init__(self, max_bits=MAX_CODE_LEN):
        self.max_bits = _check_max_bits(max_bits)

    def decode(self, reader, out_stream):
        """
        Read code words from reader (a BitReader) and write bytes to out_stream.

        Returns the number of bytes written. out_stream is not closed.
        """
        max_codes = 1 << self.max_bits
        code_bits = MIN_CODE_LEN
        # Literal strings are implicit; only codes >= FIRST_CODE are stored
        dictionary = {}
        next_code = FIRST_CODE
        written = 0

        def lookup(code):
            if code < FIRST_CODE:
                return bytes([code])
            return dictionary.get(code)

        def read_code():
            # Consume escapes; each one widens the following code words
            nonlocal code_bits
            while True:
                code = reader.read(code_bits)
                if code is None:
                    return None
                if code == (1 << code_bits) - 1 and code_bits < self.max_bits:
                    code_bits += 1
                    debug_print(f"[DEC] width -> {code_bits} bits")
                    continue
                return code

        codeword = read_code()
        if codeword is None:
            raise CorruptStreamError("Corrupted stream: no code words")
        if codeword >= FIRST_CODE:
            raise CorruptStreamError(f"Corrupted stream: first code {codeword} is not a literal")

        prev = bytes([codeword])
        out_stream.write(prev)
        written += len(prev)

        try:
            while True:
                codeword = read_code()
                if codeword is None:
                    break

                current = lookup(codeword)
                if current is None:
                    if codeword == next_code and next_code < max_codes:
                        # Encoder wrote the code for the entry it had just added
                        current = prev + prev[:1]
                    else:
                        raise CorruptStreamError(f"Invalid codeword: {codeword}")

                out_stream.write(current)
                written += len(current)

                if next_code < max_codes:
                    dictionary[next_code] = prev + current[:1]
                    next_code += 1

                prev = current
        finally:
            dictionary.clear()

        debug_print(f"[DEC] done: {written} bytes, {next_code - FIRST_CODE} entries")
        return written

def decode_bytes(data, max_bits=MAX_CODE_LEN):
    """Decode a packed code stream held in memory and return the bytes."""
    out = io.BytesIO()
    LZWDecoder(max_bits).decode(BitReader(io.BytesIO(data)), out)
    return out.getvalue()

def decompress(input_file, output_file, max_bits=MAX_CODE_LEN):
    """Decompress input_file into output_file. Returns bytes written."""
    decoder = LZWDecoder(max_bits)

    try:
        reader = BitReader(input_file)
    except OSError as e:
        raise OpenFailureError(f"{input_file}: {e.strerror or e}") from e

    try:
        try:
            out = open(output_file, 'wb')
        except OSError as e:
            raise OpenFailureError(f"{output_file}: {e.strerror or e}") from e
        with out:
            return decoder.decode(reader, out)
    finally:
        reader.close()
