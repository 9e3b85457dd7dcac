"""Pydantic models for uploaded documents and their vectors.

Hierarchy:
  DocumentChunk     — one slice of an uploaded document's text.
  VectorStoreEntry  — a chunk plus its embedding, the unit of retrieval.
  RetrievalMatch    — a scored reference to a stored entry.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class EmbeddingIntent(str, Enum):
    """Retrieval task hint sent with every embedding request.

    Document-time and query-time vectors are computed with different intents,
    even for identical text.
    """

    DOCUMENT = "RETRIEVAL_DOCUMENT"
    QUERY = "RETRIEVAL_QUERY"


class DocumentChunk(BaseModel):
    """A contiguous slice of an uploaded document."""

    model_config = ConfigDict(frozen=True)

    text: str
    sequence_index: int
    document_id: str
    source_name: str


class VectorStoreEntry(BaseModel):
    """A chunk together with its embedding vector.

    Attributes:
        id:             Unique, generated identifier of the entry.
        embedding:      The chunk's embedding vector.
        text:           Raw text content of the chunk.
        document_id:    Identifier of the owning upload.
        source_name:    Original filename of the upload.
        sequence_index: Zero-based position of the chunk within its document.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    embedding: list[float]
    text: str
    document_id: str
    source_name: str
    sequence_index: int = 0

    def get_metadata(self) -> dict:
        """Return the metadata stored next to the vector in remote indexes."""
        return {
            "text": self.text,
            "document_id": self.document_id,
            "source_name": self.source_name,
            "sequence_index": self.sequence_index,
        }


class RetrievalMatch(BaseModel):
    """A scored match returned by a vector store query.

    Score is cosine similarity in [-1, 1] for the in-process store and
    provider-defined for remote indexes. Results are ordered by score descending.
    """

    text: str
    score: float
    id: str | None = None
    document_id: str | None = None
    source_name: str | None = None
