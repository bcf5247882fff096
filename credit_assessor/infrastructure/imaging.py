"""Turn uploaded documents into JPEG page images for the vision model.

PDFs are rendered page by page with PyMuPDF; images are shrunk to fit the
model's input size. Output lands in the caller's working directory.
"""

from __future__ import annotations

import base64
import logging
from pathlib import Path
from typing import List

from PIL import Image

from credit_assessor.domain.exceptions import DocumentProcessingError, UnsupportedDocumentError

logger = logging.getLogger(__name__)

# ------------------------------------------------------------------
# Constants
# ------------------------------------------------------------------

MAX_IMAGE_SIZE = (1024, 1024)
JPEG_QUALITY = 85
PDF_RENDER_DPI = 150

PDF_MIMETYPE = "application/pdf"
IMAGE_MIMETYPES = {"image/jpeg", "image/jpg", "image/png"}
ALLOWED_MIMETYPES = IMAGE_MIMETYPES | {PDF_MIMETYPE}


def rasterize_pdf(pdf_path: Path, output_dir: Path, dpi: int = PDF_RENDER_DPI) -> List[Path]:
    """Render every PDF page to ``page-NNN.jpg``, in page order."""
    import fitz  # PyMuPDF

    pages: List[Path] = []
    try:
        with fitz.open(str(pdf_path)) as doc:
            for index, page in enumerate(doc):
                pix = page.get_pixmap(dpi=dpi)
                image = Image.frombytes("RGB", (pix.width, pix.height), pix.samples)
                out_path = output_dir / f"page-{index + 1:03d}.jpg"
                image.save(out_path, "JPEG", quality=JPEG_QUALITY)
                pages.append(out_path)
    except (RuntimeError, ValueError, OSError) as e:
        raise DocumentProcessingError(f"Failed to convert PDF to images: {e}") from e

    return pages


def prepare_image(image_path: Path, output_dir: Path) -> Path:
    """Fit the image inside MAX_IMAGE_SIZE (never enlarging) and re-encode as JPEG."""
    out_path = output_dir / "processed-image.jpg"
    try:
        with Image.open(image_path) as img:
            img = img.convert("RGB")
            img.thumbnail(MAX_IMAGE_SIZE)
            img.save(out_path, "JPEG", quality=JPEG_QUALITY)
    except OSError as e:
        raise DocumentProcessingError(f"Failed to process image: {e}") from e
    return out_path


def load_page_images(path: Path, mimetype: str, output_dir: Path) -> List[Path]:
    """Page images for one document, ready for extraction."""
    if mimetype == PDF_MIMETYPE:
        return rasterize_pdf(path, output_dir)
    if mimetype.startswith("image/"):
        return [prepare_image(path, output_dir)]
    raise UnsupportedDocumentError(f"Unsupported file type: {mimetype}")


def encode_image_base64(image_path: Path) -> str:
    try:
        return base64.b64encode(image_path.read_bytes()).decode("ascii")
    except OSError as e:
        raise DocumentProcessingError(f"Failed to convert image to base64: {e}") from e
