import argparse, os
from codec import CompressedPayload, decode_payload

def main(argv=None):
    ap = argparse.ArgumentParser()
    ap.add_argument("--input", required=True, help="path to .huf")
    ap.add_argument("--output", required=True, help="path to restored file")
    args = ap.parse_args(argv)

    with open(args.input, "rb") as f:
        payload = CompressedPayload.from_bytes(f.read())

    data = decode_payload(payload)

    os.makedirs(os.path.dirname(args.output) or ".", exist_ok=True)
    with open(args.output, "wb") as f:
        f.write(data)
    print(f"[decode] wrote {args.output} symbols={payload.n_symbols} bytes={len(data)}")

if __name__ == "__main__":
    main()
