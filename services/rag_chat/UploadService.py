"""Upload service.

Reads an uploaded file, splits its text into chunks, embeds every chunk with
the DOCUMENT intent and stores the resulting entries in the vector store.
"""

import asyncio
import uuid

from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.rag.VectorStoreInterface import VectorStoreInterface
from shared.errors import EmbeddingServiceError
from shared.helper.HelperConfig import HelperConfig
from shared.models.document import DocumentChunk, EmbeddingIntent, VectorStoreEntry

from services.rag_chat.DocumentReader import read_document_text
from services.rag_chat.TextChunker import CHUNK_SIZE, chunk_text

EMBED_CONCURRENCY = 1  # 1 = one embedding request at a time


class UploadService:
    """Orchestrates text extraction, chunking, embedding and storage of one upload."""

    def __init__(
        self,
        helper_config: HelperConfig,
        embed_client: EmbedClientInterface,
        store: VectorStoreInterface,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._embed = embed_client
        self._store = store
        self._chunk_size = helper_config.get_positive_int_val("APP_CHUNK_SIZE", default=CHUNK_SIZE)
        self._concurrency = helper_config.get_positive_int_val("APP_EMBED_CONCURRENCY", default=EMBED_CONCURRENCY)

    ##########################################
    ################ CORE ####################
    ##########################################

    async def do_upload(self, data: bytes, source_name: str) -> str:
        """Process one uploaded file and store its embeddings.

        Nothing is written to the store until every chunk has been embedded,
        so a failed or cancelled upload leaves the store unchanged.

        Args:
            data (bytes): Raw file content.
            source_name (str): Original filename.

        Returns:
            str: The generated document id shared by all stored entries.

        Raises:
            DocumentReadError: If the file cannot be turned into text.
            EmbeddingServiceError: If a chunk cannot be embedded; details carry
                how many chunks were embedded before the failure.
            StoreUnavailable: If the store rejects the entries.
        """
        document_id = str(uuid.uuid4())
        self.logging.info("Processing file: %s", source_name)

        text = read_document_text(data, source_name)
        chunks = [
            DocumentChunk(text=chunk, sequence_index=index, document_id=document_id, source_name=source_name)
            for index, chunk in enumerate(chunk_text(text, self._chunk_size))
        ]
        self.logging.info("File '%s' split into %d chunks.", source_name, len(chunks))
        if not chunks:
            self.logging.warning("File '%s' contains no text. Nothing stored.", source_name)
            return document_id

        entries = await self._embed_chunks(chunks)
        await self._store.do_upsert(entries)

        self.logging.info(
            "Successfully created and stored %d vectors for document %s (id=%s).",
            len(entries), source_name, document_id, color="green",
        )
        return document_id

    ##########################################
    ############### HELPERS ##################
    ##########################################

    async def _embed_chunk(self, chunk: DocumentChunk) -> VectorStoreEntry:
        vector = await self._embed.do_embed(chunk.text, EmbeddingIntent.DOCUMENT)
        return VectorStoreEntry(
            id=str(uuid.uuid4()),
            embedding=vector,
            text=chunk.text,
            document_id=chunk.document_id,
            source_name=chunk.source_name,
            sequence_index=chunk.sequence_index,
        )

    async def _embed_chunks(self, chunks: list[DocumentChunk]) -> list[VectorStoreEntry]:
        """Embed all chunks, keeping the chunks' order in the returned entries.

        With APP_EMBED_CONCURRENCY=1 chunks are embedded strictly one after the
        other; otherwise at most that many requests run at once. The first
        failure aborts the rest.
        """
        if self._concurrency == 1:
            entries: list[VectorStoreEntry] = []
            for chunk in chunks:
                try:
                    entries.append(await self._embed_chunk(chunk))
                except EmbeddingServiceError as exc:
                    raise self._upload_failure(exc, chunk, embedded=len(entries), total=len(chunks)) from exc
            return entries

        sem = asyncio.Semaphore(self._concurrency)
        embedded = 0

        async def _bounded(chunk: DocumentChunk) -> VectorStoreEntry:
            nonlocal embedded
            async with sem:
                try:
                    entry = await self._embed_chunk(chunk)
                except EmbeddingServiceError as exc:
                    raise self._upload_failure(exc, chunk, embedded=embedded, total=len(chunks)) from exc
                embedded += 1
                return entry

        tasks = [asyncio.ensure_future(_bounded(chunk)) for chunk in chunks]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    def _upload_failure(self, exc: EmbeddingServiceError, chunk: DocumentChunk, embedded: int, total: int) -> EmbeddingServiceError:
        self.logging.error(
            "Embedding failed for chunk %d of document '%s' (%d of %d chunks embedded): %s",
            chunk.sequence_index, chunk.source_name, embedded, total, exc,
        )
        return EmbeddingServiceError(
            f"Embedding failed for '{chunk.source_name}' at chunk {chunk.sequence_index}; nothing was stored.",
            details={**exc.details, "embedded": embedded, "total": total, "failed_chunk": chunk.sequence_index},
        )
