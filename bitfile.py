#!/usr/bin/env python3
"""
Bit-level file I/O for variable-width LZW code words.

LZW code words are 9 to 20 bits wide, but files are stored as bytes. These
classes pack code words into bytes (most significant bit first) and unpack
them again.

Both classes accept either a file name (opened and owned by the object, so
close() closes it) or an already-open binary stream (borrowed, close() only
flushes).
"""

class BitWriter:
    """
    Writes variable-width integers as a stream of bits to a binary file.

    Buffer structure: [HIGH bits: ready to write] [LOW bits: waiting for more]
    Complete bytes are pulled from the high end as soon as there are 8 bits.
    """

    def __init__(self, file):
        if isinstance(file, (str, bytes)) or hasattr(file, '__fspath__'):
            self.file = open(file, 'wb')
            self.owns_file = True
        else:
            self.file = file
            self.owns_file = False
        self.buffer = 0   # Integer accumulating bits
        self.n_bits = 0   # Count of bits in buffer not yet written
        self.bits_written = 0

    def write(self, value, num_bits):
        """
        Write the low 'num_bits' bits of 'value' to output.

        Example: write(257, 9) writes 9-bit code 0b100000001
        """
        if value < 0 or value >> num_bits:
            raise ValueError(f"Value {value} does not fit in {num_bits} bits")

        self.buffer = (self.buffer << num_bits) | value
        self.n_bits += num_bits
        self.bits_written += num_bits

        out = bytearray()
        while self.n_bits >= 8:
            self.n_bits -= 8
            out.append(self.buffer >> self.n_bits)
            # Keep only the bits not yet written
            self.buffer &= (1 << self.n_bits) - 1

        if out:
            self.file.write(out)

    def flush(self):
        """Write any remaining bits (padded with zeros) as a final byte."""
        if self.n_bits > 0:
            self.file.write(bytes([self.buffer << (8 - self.n_bits)]))
            self.buffer = 0
            self.n_bits = 0
        self.file.flush()

    def close(self):
        """Flush, then close the file if this writer opened it."""
        try:
            self.flush()
        finally:
            if self.owns_file:
                self.file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class BitReader:
    """
    Reads variable-width integers from a stream of bits in a binary file.

    Mirrors BitWriter: bytes are shifted into the low end of the buffer and
    requested bits are taken from the high end.
    """

    def __init__(self, file, chunk_size=65536):
        if isinstance(file, (str, bytes)) or hasattr(file, '__fspath__'):
            self.file = open(file, 'rb')
            self.owns_file = True
        else:
            self.file = file
            self.owns_file = False
        self.chunk_size = chunk_size
        self.chunk = b''
        self.pos = 0
        self.buffer = 0
        self.n_bits = 0

    def _next_byte(self):
        if self.pos >= len(self.chunk):
            self.chunk = self.file.read(self.chunk_size)
            self.pos = 0
            if not self.chunk:
                return None
        byte = self.chunk[self.pos]
        self.pos += 1
        return byte

    def read(self, num_bits):
        """Read 'num_bits' bits from input. Returns None at EOF."""
        while self.n_bits < num_bits:
            byte = self._next_byte()
            if byte is None:
                return None
            self.buffer = (self.buffer << 8) | byte
            self.n_bits += 8

        self.n_bits -= num_bits
        value = self.buffer >> self.n_bits
        self.buffer &= (1 << self.n_bits) - 1

        return value

    def close(self):
        """Close the input file if this reader opened it."""
        if self.owns_file:
            self.file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
