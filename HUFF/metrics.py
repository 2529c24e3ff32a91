from typing import Dict

import numpy as np

def _weights(freqs: Dict[int, int]):
    syms = sorted(freqs)
    w = np.array([freqs[s] for s in syms], dtype=np.float64)
    return syms, w

def entropy_bits(freqs: Dict[int, int]) -> float:
    """Shannon entropy of the symbol distribution, bits per symbol."""
    if not freqs:
        return 0.0
    _, w = _weights(freqs)
    p = w / w.sum()
    return float(-np.sum(p * np.log2(p)))

def average_code_length(freqs: Dict[int, int], lengths: Dict[int, int]) -> float:
    if not freqs:
        return 0.0
    syms, w = _weights(freqs)
    L = np.array([lengths[s] for s in syms], dtype=np.float64)
    return float(np.dot(w, L) / w.sum())

def encoded_bits(freqs: Dict[int, int], lengths: Dict[int, int]) -> int:
    return sum(n * lengths[s] for s, n in freqs.items())

def compression_ratio(original_size: int, compressed_size: int) -> float:
    if compressed_size == 0:
        return float("inf")
    return original_size / compressed_size
