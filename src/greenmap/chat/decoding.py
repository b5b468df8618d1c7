"""Stateful decoding of a chunked UTF-8 byte stream."""

import codecs


class FragmentDecoder:
    """Decode byte chunks into text, carrying partial characters across chunks.

    A multi-byte character split between two network chunks is held back
    until its remaining bytes arrive, so no replacement characters are
    produced at chunk boundaries.
    """

    def __init__(self, encoding: str = "utf-8"):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")

    def decode(self, chunk: bytes) -> str:
        """Decode the next chunk; may return "" while a character is incomplete."""
        return self._decoder.decode(chunk)

    def flush(self) -> str:
        """Decode whatever is left at end of stream."""
        return self._decoder.decode(b"", final=True)
