import pytest

from data.loader import MaterialLoader
from data.processor import MaterialProcessor
from models.errors import InputValidationError
from models.schemas import Material


def test_load_text_file(tmp_path):
    path = tmp_path / "notes.md"
    path.write_text("# Cells\nThe cell is the basic unit of life.", encoding="utf-8")
    material = MaterialLoader().load_file(path)
    assert material.name == "notes.md"
    assert "basic unit of life" in material.content


def test_load_bytes_keeps_upload_name():
    material = MaterialLoader().load_bytes("lecture.txt", b"Mitochondria make ATP.", "text/plain")
    assert material.name == "lecture.txt"
    assert material.content == "Mitochondria make ATP."
    assert material.mime_type == "text/plain"


def test_unsupported_and_empty_files(tmp_path):
    binary = tmp_path / "image.png"
    binary.write_bytes(b"\x89PNG")
    empty = tmp_path / "empty.txt"
    empty.write_text("   ")
    loader = MaterialLoader()
    with pytest.raises(InputValidationError, match="Unsupported"):
        loader.load_file(binary)
    with pytest.raises(InputValidationError, match="No readable text"):
        loader.load_file(empty)
    with pytest.raises(InputValidationError, match="Failed to read"):
        loader.load_file(tmp_path / "missing.txt")


def test_prepare_labels_parts_by_source():
    processor = MaterialProcessor(chunk_size=50, chunk_overlap=0, max_chars=10_000)
    parts = processor.prepare([
        Material(name="a.txt", content="alpha " * 30),
        Material(name="b.txt", content="beta"),
    ])
    assert parts[0].startswith("[Material: a.txt]")
    # round-robin: the short file is not pushed behind the long one
    assert parts[1].startswith("[Material: b.txt]")


def test_prepare_respects_budget():
    processor = MaterialProcessor(chunk_size=100, chunk_overlap=0, max_chars=250)
    parts = processor.prepare([Material(name="long.txt", content="word " * 200)])
    body = sum(len(part.split("\n", 1)[1]) for part in parts)
    assert 0 < body <= 250


def test_prepare_nothing():
    assert MaterialProcessor().prepare([]) == []
