from typing import List
from langchain_text_splitters import RecursiveCharacterTextSplitter
from langchain_core.documents import Document
import logging

from config.settings import CHUNK_OVERLAP, CHUNK_SIZE, MAX_MATERIAL_CHARS
from models.schemas import Material

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class MaterialProcessor:
    """Splits material text into prompt parts that fit the request budget"""

    def __init__(
        self,
        chunk_size: int = CHUNK_SIZE,
        chunk_overlap: int = CHUNK_OVERLAP,
        max_chars: int = MAX_MATERIAL_CHARS,
    ):
        self.max_chars = max_chars
        self.text_splitter = RecursiveCharacterTextSplitter(
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
            length_function=len,
            separators=["\n\n", "\n", " ", ""]
        )

    def split_materials(self, materials: List[Material]) -> List[Document]:
        """Split every material into chunks tagged with their source"""
        documents = [
            Document(page_content=m.content, metadata={"source_file": m.name, "mime_type": m.mime_type})
            for m in materials
        ]
        chunks = self.text_splitter.split_documents(documents)
        for idx, chunk in enumerate(chunks):
            chunk.metadata["chunk_id"] = idx
        return chunks

    def prepare(self, materials: List[Material]) -> List[str]:
        """Return labelled text parts, stopping once the character budget is spent.

        Chunks are taken round-robin across materials so a single long file
        cannot crowd out the others.
        """
        if not materials:
            logger.warning("No materials to prepare")
            return []

        by_source = {}
        for chunk in self.split_materials(materials):
            by_source.setdefault(chunk.metadata["source_file"], []).append(chunk)

        parts = []
        used = 0
        queues = list(by_source.values())
        while any(queues):
            for queue in queues:
                if not queue:
                    continue
                chunk = queue.pop(0)
                if used + len(chunk.page_content) > self.max_chars:
                    logger.warning(f"Material budget of {self.max_chars:,} characters reached, truncating")
                    return parts
                used += len(chunk.page_content)
                parts.append(f"[Material: {chunk.metadata['source_file']}]\n{chunk.page_content}")

        logger.info(f"Prepared {len(parts)} material parts ({used:,} characters)")
        return parts
