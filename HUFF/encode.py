import argparse, os
from freqs import WORD_SYMBOLS, as_symbols, count_frequencies
from huff_canonical import MAX_CODE_LEN
from codec import encode_payload
from metrics import entropy_bits, average_code_length, compression_ratio

def main(argv=None):
    ap = argparse.ArgumentParser()
    ap.add_argument("--input", required=True, help="path to raw input file")
    ap.add_argument("--output", required=True, help="path to .huf")
    ap.add_argument("--symbol-bits", type=int, default=8, choices=(8, 16), help="symbol width (default 8)")
    ap.add_argument("--words", action="store_true", help="code word and whitespace-run tokens instead of fixed-width symbols")
    ap.add_argument("--max-code-len", type=int, default=MAX_CODE_LEN, help=f"longest allowed code (default {MAX_CODE_LEN})")
    args = ap.parse_args(argv)
    symbol_bits = WORD_SYMBOLS if args.words else args.symbol_bits

    with open(args.input, "rb") as f:
        data = f.read()

    payload = encode_payload(data, symbol_bits=symbol_bits, max_code_len=args.max_code_len)
    blob = payload.to_bytes()

    os.makedirs(os.path.dirname(args.output) or ".", exist_ok=True)
    with open(args.output, "wb") as f:
        f.write(blob)

    freqs = count_frequencies(as_symbols(data, symbol_bits))
    print(f"[encode] wrote {args.output}")
    print(f"[encode] symbols={payload.n_symbols} alphabet={len(payload.lengths)} bytes {len(data)} -> {len(blob)} "
          f"ratio={compression_ratio(len(data), len(blob)):.3f}")
    print(f"[encode] entropy={entropy_bits(freqs):.4f} avg_len={average_code_length(freqs, payload.lengths):.4f} bits/symbol")

if __name__ == "__main__":
    main()
