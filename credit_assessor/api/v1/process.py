"""POST /v1/process - Extract document facts and produce a credit recommendation"""

import logging
import time
from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from credit_assessor.api.dependencies import get_credit_analyzer, get_document_processor, get_request_id
from credit_assessor.api.v1.schemas import FileDescriptor, ProcessRequest, ProcessResponse
from credit_assessor.config import settings
from credit_assessor.domain.exceptions import NoDocumentsProcessedError
from credit_assessor.domain.models import DocumentDescriptor
from credit_assessor.infrastructure.observability.logging import log_analysis
from credit_assessor.infrastructure.observability.metrics import record_analysis
from credit_assessor.services.analyzer import CreditAnalyzer
from credit_assessor.services.document_processor import DocumentProcessor

router = APIRouter()


def stored_name(file: FileDescriptor) -> Optional[str]:
    """Bare stored file name, or None for anything path-like"""
    name = Path(file.filename).name
    if name != file.filename or name in ("", ".", ".."):
        return None
    return name


def resolve_uploads(descriptors: List[FileDescriptor]) -> List[DocumentDescriptor]:
    """
    Map descriptors to stored files inside the upload directory.

    Client-supplied paths are ignored. A path-like reference rejects the
    whole request, and the uploads named by the valid references are deleted.
    """
    upload_dir = Path(settings.upload_dir)
    files, rejected = [], []
    for descriptor in descriptors:
        name = stored_name(descriptor)
        if name is None:
            rejected.append(descriptor.filename)
        else:
            files.append(descriptor.to_domain(str(upload_dir / name)))

    if rejected:
        remove_uploads(files)
        raise HTTPException(status_code=400, detail=f"Invalid file reference: {', '.join(rejected)}")
    return files


def remove_uploads(files: List[DocumentDescriptor]) -> None:
    for file in files:
        try:
            Path(file.path).unlink(missing_ok=True)
        except OSError as e:
            logging.warning(f"Failed to cleanup file {file.path}: {e}")


@router.post("/process", response_model=ProcessResponse)
async def process_documents(
    request_body: ProcessRequest,
    request: Request,
    processor: DocumentProcessor = Depends(get_document_processor),
    analyzer: CreditAnalyzer = Depends(get_credit_analyzer),
):
    """
    Run uploaded documents through extraction and credit analysis.

    Flow:
    1. Resolve descriptors to stored uploads
    2. Process each document (failures become "error" records)
    3. Analyze with the reasoning model, falling back to rules
    4. Delete the uploads
    5. Return the recommendation with per-file results
    """
    start_time = time.time()
    request_id = get_request_id(request)
    files = resolve_uploads(request_body.files)

    logging.info(
        f"Processing {len(files)} documents",
        extra={
            "request_id": request_id,
            "extraction_model": analyzer.config.vision_model,
            "analysis_model": analyzer.config.reasoning_model,
        },
    )

    try:
        processed = await processor.process_documents(files)
        analysis = await analyzer.analyze(processed)

    except NoDocumentsProcessedError as e:
        logging.warning(f"No documents processed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail={"error": str(e), "details": e.details})

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail={"error": "Document processing failed", "details": str(e)})

    finally:
        remove_uploads(files)

    duration_ms = (time.time() - start_time) * 1000
    record_analysis(analysis.used_fallback, analysis.recommendation.rating)
    log_analysis(
        request_id,
        len(processed),
        analysis.recommendation.score,
        analysis.overall_risk,
        analysis.model_info.analysis_model,
        duration_ms,
    )

    return ProcessResponse.from_analysis([r.to_dict() for r in processed], analysis)
