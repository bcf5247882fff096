"""Unit tests for per-document processing"""

import base64
from pathlib import Path

import pytest
from PIL import Image

from credit_assessor.domain.exceptions import DocumentProcessingError
from credit_assessor.domain.models import DocumentDescriptor
from credit_assessor.services.document_processor import DocumentProcessor


def make_descriptor(tmp_path: Path, name: str, mimetype: str = "application/pdf") -> DocumentDescriptor:
    stored = tmp_path / f"stored-{name}"
    stored.write_bytes(b"placeholder")
    return DocumentDescriptor(
        id=f"id-{Path(name).stem}",
        original_name=name,
        filename=stored.name,
        mimetype=mimetype,
        size=11,
        path=str(stored),
    )


def page_loader_for(page_count: int):
    def _load(path: Path, mimetype: str, output_dir: Path):
        pages = []
        for index in range(page_count):
            page = output_dir / f"page-{index + 1:03d}.jpg"
            page.write_bytes(f"page {index + 1}".encode())
            pages.append(page)
        return pages

    return _load


@pytest.fixture
def work_dir(tmp_path) -> Path:
    return tmp_path / "work"


async def test_process_document_combines_pages(tmp_path, work_dir, fake_ollama):
    fake_ollama.extract_financial_data.side_effect = [
        {"monthlyIncome": 4000, "riskFactors": ["Overdraft"], "confidence": 90, "bank": "First"},
        {"monthlyIncome": 6000, "riskFactors": ["Overdraft", "Late fee"], "confidence": 70, "bank": "Second"},
    ]
    processor = DocumentProcessor(fake_ollama, work_dir=work_dir, page_loader=page_loader_for(2))
    file = make_descriptor(tmp_path, "march_bank_statement.pdf")

    result = await processor.process_document(file)

    assert result.file_id == "id-march_bank_statement"
    assert result.file_name == "march_bank_statement.pdf"
    assert result.image_count == 2
    assert result.error is None
    record = result.extracted_data
    assert record.document_type == "bank_statement"
    assert record.risk_factors == ["Overdraft", "Late fee"]
    assert record.financial_metrics.monthly_income == 5000
    assert record.key_information["bank"] == "Second"
    assert record.confidence == 80

    # pages go to the vision model in order, tagged with the file-name type
    calls = fake_ollama.extract_financial_data.await_args_list
    assert [c.args for c in calls] == [
        (base64.b64encode(b"page 1").decode(), "bank_statement"),
        (base64.b64encode(b"page 2").decode(), "bank_statement"),
    ]


async def test_process_document_removes_page_images(tmp_path, work_dir, fake_ollama):
    fake_ollama.extract_financial_data.return_value = {"confidence": 85}
    processor = DocumentProcessor(fake_ollama, work_dir=work_dir, page_loader=page_loader_for(3))

    await processor.process_document(make_descriptor(tmp_path, "income.pdf"))

    assert list(work_dir.iterdir()) == []


async def test_process_document_removes_page_images_on_failure(tmp_path, work_dir, fake_ollama):
    fake_ollama.extract_financial_data.side_effect = DocumentProcessingError("vision model offline")
    processor = DocumentProcessor(fake_ollama, work_dir=work_dir, page_loader=page_loader_for(1))

    with pytest.raises(DocumentProcessingError):
        await processor.process_document(make_descriptor(tmp_path, "income.pdf"))

    assert list(work_dir.iterdir()) == []


async def test_document_without_pages_yields_error_record(tmp_path, work_dir, fake_ollama):
    processor = DocumentProcessor(fake_ollama, work_dir=work_dir, page_loader=page_loader_for(0))

    result = await processor.process_document(make_descriptor(tmp_path, "empty.pdf"))

    assert result.image_count == 0
    assert result.extracted_data.document_type == "error"
    assert result.extracted_data.risk_factors == ["No data extracted"]
    fake_ollama.extract_financial_data.assert_not_awaited()


async def test_process_documents_continues_after_failure(tmp_path, work_dir, fake_ollama):
    fake_ollama.extract_financial_data.return_value = {"documentType": "legal", "confidence": 95}
    processor = DocumentProcessor(fake_ollama, work_dir=work_dir)
    notes = make_descriptor(tmp_path, "notes.txt", mimetype="text/plain")
    photo = tmp_path / "contract.png"
    Image.new("RGB", (2400, 1200), "white").save(photo)
    contract = DocumentDescriptor(
        id="id-contract",
        original_name="contract.png",
        filename=photo.name,
        mimetype="image/png",
        path=str(photo),
    )

    results = await processor.process_documents([notes, contract])

    assert [r.file_name for r in results] == ["notes.txt", "contract.png"]

    failed, processed = results
    assert failed.error == "Unsupported file type: text/plain"
    assert failed.image_count == 0
    assert failed.processing_time == 0
    assert failed.extracted_data.document_type == "error"
    assert failed.extracted_data.risk_factors == ["Document processing failed"]
    assert failed.extracted_data.confidence == 0

    assert processed.error is None
    assert processed.image_count == 1
    assert processed.extracted_data.document_type == "legal"
    assert processed.extracted_data.confidence == 95
    fake_ollama.extract_financial_data.assert_awaited_once()
