#!/usr/bin/env python3
"""
LZW Encoder (variable-width codes with escape-coded width growth)

Converts a byte stream into LZW code words. Codes 0-255 are literal bytes,
codes 256 and up are dictionary strings assigned in order of first use.

Code words start out 9 bits wide. Before writing a code that does not fit
below the all-ones value of the current width, the encoder writes that
all-ones value (the escape code) and grows the width by one bit, repeating
until the code fits or the width reaches max_bits. The decoder treats the
all-ones value as "read one more bit from now on", so no header or side
channel is needed.

When the dictionary fills it is frozen: existing entries keep matching and
novel strings are written using the codes already known.

Usage:
    from lzw_encode import compress, encode_bytes

    compress('input.bin', 'output.lzw')
    data = encode_bytes(b'AAAA')
"""

import io
import sys
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from bitfile import BitWriter

MIN_CODE_LEN = 9                    # min # bits in a code word
MAX_CODE_LEN = 20                   # max # bits in a code word
FIRST_CODE = 1 << 8                 # value of 1st string code
MAX_CODES = 1 << MAX_CODE_LEN

DICTIONARY_KINDS = ('tree', 'hash')

# Global debug flag (set by the CLI --debug switch)
DEBUG = False

def debug_print(*args, **kwargs):
    """Print debug messages if DEBUG is enabled."""
    if DEBUG:
        print(*args, **kwargs, file=sys.stderr)

# ============================================================================
# ERRORS
# ============================================================================

class LZWError(ValueError):
    """Base class for encode/decode failures."""

class OpenFailureError(LZWError):
    """Input or output could not be opened."""

class EmptyInputError(LZWError):
    """Input contained no bytes, so there is nothing to encode."""

class ResourceExhaustionError(LZWError):
    """A dictionary entry could not be allocated."""

# ============================================================================
# COMPOSITE KEY
# ============================================================================

def make_key(prefix_code, suffix_byte):
    """
    Build an ordering key from a prefix code and an appended byte.

    Key format is {ms nibble of suffix} + prefix + {ls nibble of suffix}.
    Distinct pairs never collide as long as prefix_code < 2^MAX_CODE_LEN.
    """
    key = (suffix_byte & 0xF0) << MAX_CODE_LEN
    key |= prefix_code << 4
    key |= suffix_byte & 0x0F
    return key

# ============================================================================
# DICTIONARY
# ============================================================================

class DictEntry:
    """A string code: the string for prefix_code followed by suffix_byte."""
    __slots__ = ('code', 'prefix_code', 'suffix_byte', 'key', 'left', 'right')

    def __init__(self, code: int, prefix_code: int, suffix_byte: int) -> None:
        self.code = code
        self.prefix_code = prefix_code
        self.suffix_byte = suffix_byte
        self.key = make_key(prefix_code, suffix_byte)
        self.left: Optional['DictEntry'] = None    # child with < key
        self.right: Optional['DictEntry'] = None   # child with > key

    def __repr__(self):
        return f"DictEntry({self.code}, {self.prefix_code}, {self.suffix_byte})"

def _make_entry(code, prefix_code, suffix_byte):
    try:
        return DictEntry(code, prefix_code, suffix_byte)
    except MemoryError as e:
        raise ResourceExhaustionError(
            f"Unable to allocate dictionary entry for code {code}") from e

class TreeDictionary:
    """
    Dictionary stored as an unbalanced binary search tree ordered by make_key.

    No rebalancing is done, so pathological inputs can build long chains.
    Lookups and teardown are iterative, so chain depth never hits the
    recursion limit.
    """

    def __init__(self, max_codes: int = MAX_CODES) -> None:
        self.max_codes = max_codes
        self.root: Optional[DictEntry] = None
        self.by_code: Dict[int, DictEntry] = {}

    def __len__(self):
        return len(self.by_code)

    def is_full(self):
        return FIRST_CODE + len(self.by_code) >= self.max_codes

    def get(self, code):
        """Return the entry for a string code, or None."""
        return self.by_code.get(code)

    def locate(self, prefix_code: int, suffix_byte: int) -> Tuple[Optional[DictEntry], bool]:
        """
        Search for prefix_code + suffix_byte.

        Returns (entry, True) on an exact match, (parent, False) where parent
        is the node a new entry would hang from, or (None, False) for an
        empty tree.
        """
        node = self.root
        if node is None:
            return None, False

        search_key = make_key(prefix_code, suffix_byte)
        while True:
            if node.key == search_key:
                return node, True
            child = node.left if search_key < node.key else node.right
            if child is None:
                return node, False
            node = child

    def insert(self, code, prefix_code, suffix_byte, parent=None):
        """
        Add a new entry below parent (as returned by locate).

        Returns the new entry, or None if the dictionary is full.
        """
        if self.is_full():
            return None

        if parent is None and self.root is not None:
            parent, found = self.locate(prefix_code, suffix_byte)
            if found:
                raise LZWError(f"String ({prefix_code}, {suffix_byte}) already has code {parent.code}")

        entry = _make_entry(code, prefix_code, suffix_byte)
        if parent is None:
            self.root = entry
        elif entry.key < parent.key:
            parent.left = entry
        else:
            parent.right = entry

        self.by_code[code] = entry
        return entry

    def clear(self):
        """Release every node without recursing."""
        stack = [self.root] if self.root is not None else []
        while stack:
            node = stack.pop()
            if node.left is not None:
                stack.append(node.left)
            if node.right is not None:
                stack.append(node.right)
            node.left = node.right = None
        self.root = None
        self.by_code.clear()

    def depth(self):
        """Height of the tree (0 when empty)."""
        deepest = 0
        stack = [(self.root, 1)] if self.root is not None else []
        while stack:
            node, level = stack.pop()
            deepest = max(deepest, level)
            for child in (node.left, node.right):
                if child is not None:
                    stack.append((child, level + 1))
        return deepest

class HashDictionary:
    """
    Dictionary stored in a Python dict keyed by make_key.

    Same interface and same code assignment as TreeDictionary, with O(1)
    lookups regardless of input shape.
    """

    def __init__(self, max_codes: int = MAX_CODES) -> None:
        self.max_codes = max_codes
        self.entries: Dict[int, DictEntry] = {}
        self.by_code: Dict[int, DictEntry] = {}

    def __len__(self):
        return len(self.by_code)

    def is_full(self):
        return FIRST_CODE + len(self.by_code) >= self.max_codes

    def get(self, code):
        return self.by_code.get(code)

    def locate(self, prefix_code, suffix_byte):
        # There is no parent node in a hash table, misses are always (None, False)
        entry = self.entries.get(make_key(prefix_code, suffix_byte))
        return entry, entry is not None

    def insert(self, code, prefix_code, suffix_byte, parent=None):
        if self.is_full():
            return None
        key = make_key(prefix_code, suffix_byte)
        if key in self.entries:
            raise LZWError(f"String ({prefix_code}, {suffix_byte}) already has code {self.entries[key].code}")
        entry = _make_entry(code, prefix_code, suffix_byte)
        self.entries[key] = entry
        self.by_code[code] = entry
        return entry

    def clear(self):
        self.entries.clear()
        self.by_code.clear()

def new_dictionary(kind='tree', max_codes=MAX_CODES):
    """Create an empty dictionary of the requested kind ('tree' or 'hash')."""
    if kind == 'tree':
        return TreeDictionary(max_codes)
    if kind == 'hash':
        return HashDictionary(max_codes)
    raise ValueError(f"Unknown dictionary kind {kind!r} (expected one of {', '.join(DICTIONARY_KINDS)})")

# ============================================================================
# CODE WIDTH
# ============================================================================

class CodeWidth:
    """
    Tracks the current code word width and writes escape codes on growth.

    A code word v is written at the current width only once
    v < 2^width - 1. Until then the all-ones value 2^width - 1 is written at
    the current width and the width grows by one. At max_bits no more
    escapes are written.
    """

    def __init__(self, min_bits=MIN_CODE_LEN, max_bits=MAX_CODE_LEN):
        self.min_bits = min_bits
        self.max_bits = max_bits
        self.current = min_bits
        self.escapes = 0

    def escape_code(self):
        """All-ones value at the current width."""
        return (1 << self.current) - 1

    def emit(self, writer, value):
        """Write value (plus any escapes it needs). Returns the width used."""
        while value >= self.escape_code() and self.current < self.max_bits:
            writer.write(self.escape_code(), self.current)
            self.escapes += 1
            self.current += 1
            debug_print(f"[ENC] width -> {self.current} bits (before code {value})")

        writer.write(value, self.current)
        return self.current

# ============================================================================
# ENCODER
# ============================================================================

@dataclass
class EncodeStats:
    """Summary of one encode call."""
    bytes_read: int = 0
    codes_written: int = 0
    escapes_written: int = 0
    entries: int = 0
    final_width: int = MIN_CODE_LEN
    dictionary_full: bool = False

def _check_max_bits(max_bits):
    if not MIN_CODE_LEN <= max_bits <= MAX_CODE_LEN:
        raise ValueError(f"max_bits must be between {MIN_CODE_LEN} and {MAX_CODE_LEN}, got {max_bits}")
    return max_bits

def iter_bytes(stream, chunk_size=65536):
    """Yield the bytes of a binary stream one value at a time."""
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            return
        yield from chunk

class LZWEncoder:
    """
    LZW encoder driver.

    Each encode() call builds its own dictionary and width state and
    releases them before returning, so one encoder can be reused.
    """

    def __init__(self, max_bits=MAX_CODE_LEN, dictionary='tree', keep_dictionary=False):
        self.max_bits = _check_max_bits(max_bits)
        if dictionary not in DICTIONARY_KINDS:
            raise ValueError(f"Unknown dictionary kind {dictionary!r} (expected one of {', '.join(DICTIONARY_KINDS)})")
        self.dictionary_kind = dictionary
        # When set, encode() leaves {code: (prefix_code, suffix_byte)} here
        self.keep_dictionary = keep_dictionary
        self.last_dictionary = None

    def encode(self, in_stream, writer):
        """
        Encode every byte of in_stream and write code words to writer.

        writer needs a write(value, num_bits) method. The streams are not
        closed here; a writer with a flush() method is flushed at the end.
        Returns EncodeStats.
        """
        stats = EncodeStats()
        dictionary = new_dictionary(self.dictionary_kind, 1 << self.max_bits)
        width = CodeWidth(MIN_CODE_LEN, self.max_bits)
        next_code = FIRST_CODE

        def put(code):
            width.emit(writer, code)
            stats.codes_written += 1
            debug_print(f"[ENC] OUTPUT code={code} width={width.current}")

        try:
            source = iter_bytes(in_stream)

            # Init: code string starts as the first byte
            active = next(source, None)
            if active is None:
                raise EmptyInputError("Input is empty, nothing to encode")
            stats.bytes_read = 1

            # Seed: first two bytes make the tree root
            c = next(source, None)
            if c is not None:
                stats.bytes_read += 1
                dictionary.insert(next_code, active, c)
                debug_print(f"[ENC] ADDED code={next_code} -> ({active}, {c})")
                next_code += 1
                put(active)
                active = c

            # Running
            for c in source:
                stats.bytes_read += 1
                node, found = dictionary.locate(active, c)

                if found:
                    # active + c is in the dictionary, keep extending
                    active = node.code
                    continue

                if dictionary.insert(next_code, active, c, node) is not None:
                    debug_print(f"[ENC] ADDED code={next_code} -> ({active}, {c})")
                    next_code += 1
                elif not stats.dictionary_full:
                    stats.dictionary_full = True
                    print("Warning: Dictionary Full", file=sys.stderr)

                put(active)
                active = c

            # Final: write out last of the code
            put(active)

            if hasattr(writer, 'flush'):
                writer.flush()
        finally:
            stats.entries = len(dictionary)
            stats.escapes_written = width.escapes
            stats.final_width = width.current
            if self.keep_dictionary:
                self.last_dictionary = {
                    code: (entry.prefix_code, entry.suffix_byte)
                    for code, entry in dictionary.by_code.items()
                }
            dictionary.clear()

        debug_print(f"[ENC] done: {stats}")
        return stats

def encode(in_stream, writer, max_bits=MAX_CODE_LEN, dictionary='tree'):
    """Encode in_stream to writer with a fresh LZWEncoder."""
    return LZWEncoder(max_bits, dictionary).encode(in_stream, writer)

def encode_bytes(data, max_bits=MAX_CODE_LEN, dictionary='tree'):
    """Encode a bytes object and return the packed code stream."""
    out = io.BytesIO()
    encode(io.BytesIO(data), BitWriter(out), max_bits, dictionary)
    return out.getvalue()

def compress(input_file, output_file=None, max_bits=MAX_CODE_LEN, dictionary='tree'):
    """
    Compress input_file to output_file (standard output when None).

    Files opened here are closed here, on every path. A partially written
    output file is left in place if encoding fails after it was opened.
    """
    encoder = LZWEncoder(max_bits, dictionary)

    try:
        f_in = open(input_file, 'rb')
    except OSError as e:
        raise OpenFailureError(f"{input_file}: {e.strerror or e}") from e

    try:
        if output_file is None:
            writer = BitWriter(sys.stdout.buffer)
        else:
            try:
                writer = BitWriter(output_file)
            except OSError as e:
                raise OpenFailureError(f"{output_file}: {e.strerror or e}") from e

        try:
            return encoder.encode(f_in, writer)
        finally:
            writer.close()
    finally:
        f_in.close()
