import struct
from typing import Dict

from freqs import WORD_SYMBOLS
from huff_canonical import MAX_CODE_LEN, Symbol
from huff_errors import MalformedHeader

MAGIC = b"HUFF"
VERSION = 1

# Header (little-endian):
# magic(4) version(1) symbol_bits(1) n_symbols(u64) alphabet_size(u32)
# symbol_bits: 8, 16, or 0 for word tokens
HDR_FMT = "<4sBBQI"
HDR_SIZE = struct.calcsize(HDR_FMT)

# Code-length table entry: symbol(u8|u16) codelen(u8)
TBL_FMTS = {8: "<BB", 16: "<HB"}

# Word table entry: token_len(u32) token(token_len bytes) codelen(u8)
WORD_LEN_FMT = "<I"
WORD_LEN_SIZE = struct.calcsize(WORD_LEN_FMT)

SYMBOL_WIDTHS = (WORD_SYMBOLS,) + tuple(TBL_FMTS)

def write_header(f, *, symbol_bits: int, n_symbols: int, alphabet_size: int):
    if symbol_bits not in SYMBOL_WIDTHS:
        raise ValueError(f"Unsupported symbol width: {symbol_bits}")
    f.write(struct.pack(HDR_FMT, MAGIC, VERSION, symbol_bits, n_symbols, alphabet_size))

def read_header(f):
    data = f.read(HDR_SIZE)
    if len(data) != HDR_SIZE:
        raise MalformedHeader("Malformed stream: header too short")
    magic, ver, symbol_bits, n_symbols, alphabet_size = struct.unpack(HDR_FMT, data)
    if magic != MAGIC:
        raise MalformedHeader("Bad magic number (not HUFF)")
    if ver != VERSION:
        raise MalformedHeader(f"Unsupported version: {ver}")
    if symbol_bits not in SYMBOL_WIDTHS:
        raise MalformedHeader(f"Unsupported symbol width: {symbol_bits}")
    if symbol_bits != WORD_SYMBOLS and alphabet_size > (1 << symbol_bits):
        raise MalformedHeader(f"Alphabet size {alphabet_size} too large for {symbol_bits}-bit symbols")
    if (alphabet_size == 0) != (n_symbols == 0):
        raise MalformedHeader(f"Alphabet size {alphabet_size} inconsistent with {n_symbols} symbols")
    if alphabet_size > n_symbols:
        raise MalformedHeader(f"Alphabet size {alphabet_size} exceeds {n_symbols} symbols")
    return dict(symbol_bits=symbol_bits, n_symbols=n_symbols, alphabet_size=alphabet_size)

def write_table(f, lengths: Dict[Symbol, int], symbol_bits: int):
    for sym in sorted(lengths):
        L = lengths[sym]
        if not (1 <= L <= MAX_CODE_LEN):
            raise ValueError(f"code length out of range (1..{MAX_CODE_LEN})")
        if symbol_bits == WORD_SYMBOLS:
            if not sym:
                raise ValueError("empty word token")
            f.write(struct.pack(WORD_LEN_FMT, len(sym)))
            f.write(sym)
            f.write(struct.pack("<B", L))
            continue
        if not (0 <= sym < (1 << symbol_bits)):
            raise ValueError(f"symbol {sym} out of range")
        f.write(struct.pack(TBL_FMTS[symbol_bits], sym, L))

def _read_exact(f, n: int) -> bytes:
    data = f.read(n)
    if len(data) != n:
        raise MalformedHeader("Malformed stream: table truncated")
    return data

def _read_entry(f, symbol_bits: int):
    if symbol_bits == WORD_SYMBOLS:
        (n,) = struct.unpack(WORD_LEN_FMT, _read_exact(f, WORD_LEN_SIZE))
        if n == 0:
            raise MalformedHeader("Empty word token in code table")
        sym = _read_exact(f, n)
        (L,) = struct.unpack("<B", _read_exact(f, 1))
        return sym, L
    fmt = TBL_FMTS[symbol_bits]
    return struct.unpack(fmt, _read_exact(f, struct.calcsize(fmt)))

def read_table(f, alphabet_size: int, symbol_bits: int) -> Dict[Symbol, int]:
    lengths: Dict[Symbol, int] = {}
    for _ in range(alphabet_size):
        sym, L = _read_entry(f, symbol_bits)
        if sym in lengths:
            raise MalformedHeader(f"Duplicate symbol {sym!r} in code table")
        if not (1 <= L <= MAX_CODE_LEN):
            raise MalformedHeader(f"Code length {L} for symbol {sym!r} out of range (1..{MAX_CODE_LEN})")
        lengths[sym] = L
    return lengths
