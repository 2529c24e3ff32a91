from __future__ import annotations
import heapq
from dataclasses import dataclass
from fractions import Fraction
from typing import Dict, Tuple, Optional, Union

from huff_errors import EmptyAlphabetOverflow, CodeLengthOverflow, MalformedHeader, CorruptStream

# Longest code the encoder emits and the decoder accepts
MAX_CODE_LEN = 32

Symbol = Union[int, bytes]  # byte value, 16-bit value or word token

@dataclass(frozen=True)
class Node:
    freq: int
    sym: Optional[Symbol] = None
    left: Optional["Node"] = None
    right: Optional["Node"] = None

    @property
    def is_leaf(self) -> bool:
        return self.sym is not None

def build_tree(freqs: Dict[Symbol, int]) -> Node:
    """
    Greedy Huffman merge with a fixed tie-break.

    Heap key is (freq, order): leaves are numbered 0..k-1 in ascending symbol
    order, internal nodes k, k+1, ... as they are created. Equal weights
    therefore pop lower symbols first, then older internal nodes.
    The first popped node of each pair becomes the left child.
    """
    if any(f < 0 for f in freqs.values()):
        raise ValueError("Frequencies must be non-negative")
    present = sorted(s for s, f in freqs.items() if f > 0)
    if not present:
        raise EmptyAlphabetOverflow("Cannot build a Huffman tree without symbols of non-zero frequency")
    pq = []
    for order, sym in enumerate(present):
        pq.append((freqs[sym], order, Node(freq=freqs[sym], sym=sym)))
    heapq.heapify(pq)
    if len(pq) == 1:
        # Edge case: only one symbol -> artificial parent gives it length 1
        only = pq[0][2]
        return Node(freq=only.freq, left=only)
    order = len(pq)
    while len(pq) > 1:
        fa, _, a = heapq.heappop(pq)
        fb, _, b = heapq.heappop(pq)
        heapq.heappush(pq, (fa + fb, order, Node(freq=fa + fb, left=a, right=b)))
        order += 1
    return pq[0][2]

def code_lengths_from_tree(root: Node) -> Dict[Symbol, int]:
    out: Dict[Symbol, int] = {}
    stack = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        if node.is_leaf:
            out[node.sym] = depth
            continue
        for child in (node.right, node.left):
            if child is not None:
                stack.append((child, depth + 1))
    return out

def build_code_lengths(freqs: Dict[Symbol, int], max_len: int = MAX_CODE_LEN) -> Dict[Symbol, int]:
    if not 1 <= max_len <= MAX_CODE_LEN:
        raise ValueError(f"max_len must be in 1..{MAX_CODE_LEN}")
    lengths = code_lengths_from_tree(build_tree(freqs))
    longest = max(lengths.values())
    if longest > max_len:
        raise CodeLengthOverflow(f"Code length {longest} exceeds maximum of {max_len} bits")
    return lengths

def check_lengths(lengths: Dict[Symbol, int]):
    """
    Reject length tables no Huffman tree can produce.
    Kraft sum must be exactly 1; the one exception is a lone 1-bit symbol.
    """
    if not lengths:
        return
    for sym, L in lengths.items():
        if not 1 <= L <= MAX_CODE_LEN:
            raise MalformedHeader(f"Code length {L} for symbol {sym} out of range (1..{MAX_CODE_LEN})")
    if len(lengths) == 1:
        (L,) = lengths.values()
        if L != 1:
            raise MalformedHeader("Single-symbol table must use a 1-bit code")
        return
    kraft = sum(Fraction(1, 1 << L) for L in lengths.values())
    if kraft > 1:
        raise MalformedHeader("Code lengths over-subscribe the code space")
    if kraft < 1:
        raise MalformedHeader("Code lengths leave the code space incomplete")

def canonical_codes_from_lengths(lengths: Dict[Symbol, int]) -> Dict[Symbol, Tuple[int, int]]:
    """
    Return mapping: sym -> (code_int, code_len), canonical Huffman.
    Canonical ordering: sort by (code_len, sym)
    """
    items = sorted(lengths.items(), key=lambda kv: (kv[1], kv[0]))
    code = 0
    prev_len = 0
    out: Dict[Symbol, Tuple[int, int]] = {}
    for sym, L in items:
        code <<= (L - prev_len)
        if code >> L:
            raise MalformedHeader(f"No {L}-bit code left for symbol {sym}")
        out[sym] = (code, L)
        code += 1
        prev_len = L
    return out

def build_decode_trie(codes: Dict[Symbol, Tuple[int, int]]):
    """
    Build a binary trie for decoding bits -> symbol.
    """
    root = {}
    for sym, (code, L) in codes.items():
        cur = root
        for i in range(L - 1, -1, -1):
            if "sym" in cur:
                raise MalformedHeader(f"Code for symbol {sym} extends another code")
            bit = (code >> i) & 1
            cur = cur.setdefault(bit, {})
        if cur:
            raise MalformedHeader(f"Code for symbol {sym} is a prefix of another code")
        cur["sym"] = sym
    return root

def decode_one_symbol(trie, bitreader) -> Symbol:
    cur = trie
    while "sym" not in cur:
        b = bitreader.read_bit()
        if b not in cur:
            raise CorruptStream("Invalid Huffman code (corrupt stream)")
        cur = cur[b]
    return cur["sym"]
