import mimetypes
import tempfile
from pathlib import Path
from typing import Iterable, List

from langchain_community.document_loaders import PyPDFLoader
import logging

from models.errors import InputValidationError
from models.schemas import Material

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"
TEXT_SUFFIXES = {".txt", ".md", ".markdown", ".csv", ".json", ".html", ".htm", ".rst"}


class MaterialLoader:
    """Turns uploaded course materials (PDF or plain text) into Material objects"""

    def load_file(self, path) -> Material:
        path = Path(path)
        if not path.exists():
            raise InputValidationError(f"Failed to read file: {path.name}")

        mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        logger.info(f"Processing: {path.name}")

        if path.suffix.lower() == ".pdf":
            content = self._load_pdf(path)
            mime_type = PDF_MIME_TYPE
        elif path.suffix.lower() in TEXT_SUFFIXES or mime_type.startswith("text/"):
            content = path.read_text(encoding="utf-8", errors="replace")
        else:
            raise InputValidationError(f"Unsupported file type: {path.name}")

        if not content.strip():
            raise InputValidationError(f"No readable text found in: {path.name}")

        logger.info(f"  ✓ Loaded {len(content):,} characters from {path.name}")
        return Material(name=path.name, content=content, mime_type=mime_type)

    def load_bytes(self, name: str, data: bytes, mime_type: str = None) -> Material:
        """Load an upload held in memory"""
        suffix = Path(name).suffix or ".txt"
        with tempfile.TemporaryDirectory() as tmp_dir:
            tmp_path = Path(tmp_dir) / f"upload{suffix}"
            tmp_path.write_bytes(data)
            material = self.load_file(tmp_path)
        return Material(name=name, content=material.content, mime_type=mime_type or material.mime_type)

    def load_all(self, paths: Iterable) -> List[Material]:
        materials = [self.load_file(path) for path in paths]
        logger.info(f"Total materials loaded: {len(materials)}")
        return materials

    def _load_pdf(self, path: Path) -> str:
        documents = PyPDFLoader(str(path)).load()
        logger.info(f"  ✓ Loaded {len(documents)} pages from {path.name}")
        return "\n\n".join(doc.page_content for doc in documents)
