class HuffmanError(ValueError):
    """Base class for every codec failure."""


class EmptyAlphabetOverflow(HuffmanError):
    """Tree construction was asked to work on zero symbols."""


class CodeLengthOverflow(HuffmanError):
    """A derived code length is longer than the configured maximum."""


class MalformedHeader(HuffmanError):
    """Header or code-length table of an untrusted stream is inconsistent."""


class TruncatedStream(HuffmanError, EOFError):
    """Body ended before all symbols were decoded."""


class CorruptStream(HuffmanError):
    """Body contains a bit sequence that matches no code."""
