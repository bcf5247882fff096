"""Per-document processing: page images -> extracted facts -> combined record"""

import asyncio
import logging
import tempfile
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Sequence

from credit_assessor.config import settings
from credit_assessor.domain.combiner import combine_extracted_facts, determine_document_type
from credit_assessor.domain.models import (
    CombinedDocumentRecord,
    DocumentDescriptor,
    DocumentType,
    ProcessingResult,
)
from credit_assessor.infrastructure.clients.ollama import OllamaClient
from credit_assessor.infrastructure.imaging import encode_image_base64, load_page_images
from credit_assessor.infrastructure.observability.metrics import document_failure_counter
from credit_assessor.utils.number_utils import round_half_up

logger = logging.getLogger(__name__)

PROCESSING_FAILED_RISK_FACTOR = "Document processing failed"

PageLoader = Callable[[Path, str, Path], List[Path]]


def failed_document_result(file: DocumentDescriptor, error: str) -> ProcessingResult:
    """Stand-in result for a document that could not be processed"""
    return ProcessingResult(
        file_id=file.id,
        file_name=file.original_name,
        extracted_data=CombinedDocumentRecord(
            document_type=DocumentType.ERROR.value,
            key_information={},
            risk_factors=[PROCESSING_FAILED_RISK_FACTOR],
            confidence=0,
        ),
        image_count=0,
        processing_time=0,
        error=error,
    )


class DocumentProcessor:
    """Runs each uploaded document through rasterization and vision extraction"""

    def __init__(
        self,
        client: OllamaClient,
        work_dir: str | Path | None = None,
        page_loader: PageLoader = load_page_images,
    ):
        self.client = client
        self.work_dir = Path(work_dir or settings.work_dir)
        self.page_loader = page_loader

    async def process_documents(self, files: Sequence[DocumentDescriptor]) -> List[ProcessingResult]:
        """
        Process documents one at a time.

        A failing document is replaced by an "error" result; the rest of the
        batch always runs.
        """
        results = []
        for file in files:
            logger.info("Processing file: %s", file.original_name)
            try:
                results.append(await self.process_document(file))
            except Exception as e:  # one bad document never aborts the batch
                document_failure_counter.inc()
                logger.error(
                    f"Failed to process {file.original_name}: {e}",
                    extra={"file_id": file.id},
                )
                results.append(failed_document_result(file, str(e)))
        return results

    async def process_document(self, file: DocumentDescriptor) -> ProcessingResult:
        """
        Extract and combine facts for a single document.

        Page images live in a per-document temp directory that is removed on
        success and on failure.
        """
        start_time = time.monotonic()
        self.work_dir.mkdir(parents=True, exist_ok=True)
        document_type = determine_document_type(file.original_name)

        with tempfile.TemporaryDirectory(prefix=f"{file.id}-", dir=self.work_dir) as temp_dir:
            images = await asyncio.to_thread(self.page_loader, Path(file.path), file.mimetype, Path(temp_dir))

            facts: List[Dict[str, Any]] = []
            for index, image_path in enumerate(images):
                logger.info("Processing image %d/%d for %s", index + 1, len(images), file.original_name)
                image_base64 = encode_image_base64(image_path)
                facts.append(await self.client.extract_financial_data(image_base64, document_type.value))

            combined = combine_extracted_facts(facts, document_type)

        return ProcessingResult(
            file_id=file.id,
            file_name=file.original_name,
            extracted_data=combined,
            image_count=len(images),
            processing_time=round_half_up(time.monotonic() - start_time),
        )
