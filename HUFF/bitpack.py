from huff_errors import TruncatedStream

class BitWriter:
    def __init__(self):
        self._buf = bytearray()
        self._cur = 0
        self._nbits = 0  # bits currently in _cur (0..7)
        self.bits_written = 0

    def write_code(self, code: int, length: int):
        """Write 'length' bits of code (MSB-first)."""
        if code >> length:
            raise ValueError(f"code {code:#x} does not fit in {length} bits")
        self._cur = (self._cur << length) | code
        self._nbits += length
        self.bits_written += length
        while self._nbits >= 8:
            self._nbits -= 8
            self._buf.append((self._cur >> self._nbits) & 0xFF)
        self._cur &= (1 << self._nbits) - 1

    def finish(self) -> bytes:
        """Pad remaining bits with zeros."""
        if self._nbits > 0:
            self._buf.append((self._cur << (8 - self._nbits)) & 0xFF)
            self._cur = 0
            self._nbits = 0
        return bytes(self._buf)

class BitReader:
    def __init__(self, data: bytes):
        self.data = data
        self.i = 0
        self.bit = 0  # bit index in current byte (0..7), MSB-first

    def read_bit(self) -> int:
        if self.i >= len(self.data):
            raise TruncatedStream("Unexpected end of bitstream")
        b = (self.data[self.i] >> (7 - self.bit)) & 1
        self.bit += 1
        if self.bit == 8:
            self.bit = 0
            self.i += 1
        return b

    @property
    def bits_read(self) -> int:
        return self.i * 8 + self.bit
