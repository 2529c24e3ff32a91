import re
from collections import Counter
from multiprocessing import Pool
from typing import Dict, Iterable, List, Optional, Sequence, Union

import numpy as np

SYMBOL_DTYPES = {8: np.dtype(np.uint8), 16: np.dtype(">u2")}

# symbol_bits value for variable-length word tokens
WORD_SYMBOLS = 0

# Maximal runs of non-whitespace or of ASCII whitespace (space \t \n \f \r).
# Keeping the whitespace runs as tokens makes word mode lossless.
_TOKEN_RE = re.compile(rb"[^ \t\n\x0c\r]+|[ \t\n\x0c\r]+")

def as_tokens(data: bytes) -> List[bytes]:
    return _TOKEN_RE.findall(data)

def as_symbols(data: bytes, symbol_bits: int = 8) -> Union[np.ndarray, List[bytes]]:
    """
    View raw bytes as a symbol sequence.
    8-bit: one symbol per byte. 16-bit: one symbol per big-endian byte pair.
    WORD_SYMBOLS: list of word / whitespace-run tokens.
    """
    if symbol_bits == WORD_SYMBOLS:
        return as_tokens(data)
    if symbol_bits not in SYMBOL_DTYPES:
        raise ValueError(f"Unsupported symbol width: {symbol_bits}")
    dtype = SYMBOL_DTYPES[symbol_bits]
    if len(data) % dtype.itemsize:
        raise ValueError(f"Input length {len(data)} is not a multiple of {dtype.itemsize} bytes")
    return np.frombuffer(data, dtype=dtype)

def from_symbols(symbols: Sequence, symbol_bits: int = 8) -> bytes:
    if symbol_bits == WORD_SYMBOLS:
        return b"".join(symbols)
    return np.array(symbols, dtype=SYMBOL_DTYPES[symbol_bits]).tobytes()

def _count_chunk(symbols) -> Dict:
    if len(symbols) == 0:
        return {}
    if isinstance(symbols, np.ndarray):
        counts = np.bincount(symbols.astype(np.int64))
        nz = np.flatnonzero(counts)
        return {int(s): int(counts[s]) for s in nz}
    return dict(Counter(symbols))

def merge_frequencies(tables: Iterable[Dict]) -> Dict:
    out = {}
    for t in tables:
        for sym, n in t.items():
            out[sym] = out.get(sym, 0) + n
    return out

def count_frequencies(symbols, *, chunk_size: Optional[int] = None, processes: int = 1) -> Dict:
    """
    symbol -> occurrence count, only for symbols that occur.

    chunk_size: count non-overlapping chunks separately and merge the partial
    tables (in a process pool when processes > 1). Same result as one pass.
    """
    if chunk_size is not None and chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    if chunk_size is None or len(symbols) <= chunk_size:
        return _count_chunk(symbols)

    chunks = [symbols[i:i+chunk_size] for i in range(0, len(symbols), chunk_size)]
    if processes > 1:
        with Pool(processes) as pool:
            parts = pool.map(_count_chunk, chunks)
    else:
        parts = [_count_chunk(c) for c in chunks]
    return merge_frequencies(parts)
