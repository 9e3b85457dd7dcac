"""Fixed-size text chunking for uploaded documents."""

from collections.abc import Sequence

from shared.errors import InvalidConfiguration

CHUNK_SIZE = 1000  # characters per text chunk


class ChunkSequence(Sequence):
    """Lazy, restartable view of a text split into fixed-size chunks.

    Chunks are contiguous and non-overlapping; every chunk has exactly
    chunk_size characters except possibly the last. Slices are computed on
    access, so iterating twice yields the same chunks.
    """

    def __init__(self, text: str, chunk_size: int):
        self._text = text
        self._chunk_size = chunk_size

    def __len__(self) -> int:
        return -(-len(self._text) // self._chunk_size)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return [self[i] for i in range(*index.indices(len(self)))]
        if index < 0:
            index += len(self)
        if not 0 <= index < len(self):
            raise IndexError("chunk index out of range")
        start = index * self._chunk_size
        return self._text[start:start + self._chunk_size]

    def __repr__(self) -> str:
        return f"ChunkSequence(chunks={len(self)}, chunk_size={self._chunk_size})"


def chunk_text(text: str, chunk_size: int = CHUNK_SIZE) -> ChunkSequence:
    """Split a document's text into contiguous chunks of at most chunk_size characters.

    Args:
        text (str): The full document text. Empty text yields no chunks.
        chunk_size (int): Maximum characters per chunk.

    Returns:
        ChunkSequence: The ordered chunks.

    Raises:
        InvalidConfiguration: If chunk_size is not a positive integer.
    """
    if not isinstance(chunk_size, int) or chunk_size <= 0:
        raise InvalidConfiguration(f"Chunk size must be a positive integer, got {chunk_size!r}.")
    return ChunkSequence(text or "", chunk_size)
