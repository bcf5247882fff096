"""POST /v1/upload - Store documents for later processing"""

import logging
import uuid
from pathlib import Path
from typing import List

from fastapi import APIRouter, File, HTTPException, UploadFile

from credit_assessor.api.v1.schemas import FileDescriptor, UploadResponse
from credit_assessor.config import settings
from credit_assessor.infrastructure.imaging import ALLOWED_MIMETYPES

router = APIRouter()


@router.post("/upload", response_model=UploadResponse)
async def upload_documents(documents: List[UploadFile] = File(...)):
    """
    Accept up to `max_files_per_upload` PDF/JPEG/PNG files.

    Files are validated as a batch before anything is written, then stored
    under a generated name in the upload directory.
    """
    if not documents:
        raise HTTPException(status_code=400, detail="No files uploaded")
    if len(documents) > settings.max_files_per_upload:
        raise HTTPException(
            status_code=400,
            detail=f"Too many files. Maximum is {settings.max_files_per_upload} per upload.",
        )

    payloads = []
    for document in documents:
        if document.content_type not in ALLOWED_MIMETYPES:
            raise HTTPException(
                status_code=400,
                detail="Invalid file type. Only PDF and image files are allowed.",
            )
        content = await document.read()
        if len(content) > settings.max_upload_bytes:
            max_mb = settings.max_upload_bytes // (1024 * 1024)
            raise HTTPException(status_code=400, detail=f"File too large. Maximum size is {max_mb}MB.")
        payloads.append((document, content))

    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)

    files = []
    for document, content in payloads:
        file_id = str(uuid.uuid4())
        original_name = document.filename or "document"
        filename = f"documents-{file_id}{Path(original_name).suffix.lower()}"
        stored_path = upload_dir / filename
        stored_path.write_bytes(content)

        files.append(
            FileDescriptor(
                id=file_id,
                original_name=original_name,
                filename=filename,
                size=len(content),
                mimetype=document.content_type,
                path=str(stored_path),
            )
        )

    logging.info(f"Uploaded {len(files)} files for processing")

    return UploadResponse(
        success=True,
        files=files,
        message=f"{len(files)} file(s) uploaded successfully",
    )
