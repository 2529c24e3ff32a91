import io
from dataclasses import dataclass, field
from multiprocessing import Pool
from typing import Dict, List, Optional, Sequence

from freqs import as_symbols, from_symbols, count_frequencies
from huff_canonical import (MAX_CODE_LEN, Symbol, build_code_lengths, check_lengths,
                            canonical_codes_from_lengths, build_decode_trie, decode_one_symbol)
from bitpack import BitWriter, BitReader
from bitstream import write_header, read_header, write_table, read_table
from huff_errors import MalformedHeader

@dataclass
class CompressedPayload:
    n_symbols: int
    symbol_bits: int = 8
    lengths: Dict[Symbol, int] = field(default_factory=dict)  # sym -> code length
    body: bytes = b""

    def to_bytes(self) -> bytes:
        f = io.BytesIO()
        write_header(f, symbol_bits=self.symbol_bits, n_symbols=self.n_symbols,
                     alphabet_size=len(self.lengths))
        write_table(f, self.lengths, self.symbol_bits)
        f.write(self.body)
        return f.getvalue()

    @classmethod
    def from_bytes(cls, blob: bytes) -> "CompressedPayload":
        f = io.BytesIO(blob)
        h = read_header(f)
        lengths = read_table(f, h["alphabet_size"], h["symbol_bits"])
        return cls(n_symbols=h["n_symbols"], symbol_bits=h["symbol_bits"],
                   lengths=lengths, body=f.read())

def encode_payload(data: bytes, *, symbol_bits: int = 8, max_code_len: int = MAX_CODE_LEN) -> CompressedPayload:
    """
    Steps:
      1) symbol view + frequency count
      2) Huffman lengths (tree is discarded) + canonical codes
      3) pack codes MSB-first, zero padded to a byte boundary
    """
    symbols = as_symbols(data, symbol_bits)
    if len(symbols) == 0:
        return CompressedPayload(n_symbols=0, symbol_bits=symbol_bits)

    freqs = count_frequencies(symbols)
    lengths = build_code_lengths(freqs, max_len=max_code_len)
    codes = canonical_codes_from_lengths(lengths)

    bw = BitWriter()
    if not isinstance(symbols, list):
        symbols = symbols.tolist()
    for sym in symbols:
        code, L = codes[sym]
        bw.write_code(code, L)
    return CompressedPayload(n_symbols=len(symbols), symbol_bits=symbol_bits,
                             lengths=lengths, body=bw.finish())

def decode_payload(payload: CompressedPayload) -> bytes:
    if payload.n_symbols == 0:
        return b""
    if not payload.lengths:
        raise MalformedHeader(f"Empty code table for {payload.n_symbols} symbols")

    # 1) Rebuild canonical codes from lengths
    check_lengths(payload.lengths)
    codes = canonical_codes_from_lengths(payload.lengths)
    trie = build_decode_trie(codes)

    # 2) Exactly n_symbols codes; trailing padding bits are never read
    br = BitReader(payload.body)
    out = [decode_one_symbol(trie, br) for _ in range(payload.n_symbols)]
    return from_symbols(out, payload.symbol_bits)

def compress(data: bytes, *, symbol_bits: int = 8, max_code_len: int = MAX_CODE_LEN) -> bytes:
    return encode_payload(data, symbol_bits=symbol_bits, max_code_len=max_code_len).to_bytes()

def decompress(blob: bytes) -> bytes:
    return decode_payload(CompressedPayload.from_bytes(blob))

def compress_many(inputs: Sequence[bytes], processes: Optional[int] = None) -> List[bytes]:
    """Compress unrelated inputs independently; output order follows input order."""
    if processes == 1:
        return [compress(x) for x in inputs]
    with Pool(processes) as pool:
        return pool.map(compress, inputs)

def decompress_many(blobs: Sequence[bytes], processes: Optional[int] = None) -> List[bytes]:
    if processes == 1:
        return [decompress(b) for b in blobs]
    with Pool(processes) as pool:
        return pool.map(decompress, blobs)
