"""FastAPI application for the ID card OCR API.

Provides REST endpoints for ID card extraction from uploads or base64
captures, image preprocessing, and health checks.
"""

import shutil
import time
import uuid
from typing import Annotated

from fastapi import FastAPI, File, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from src.ocr.id_card_reader import IDCardReader, OCRResult
from src.preprocessing.codec import ImageDecodeError
from src.preprocessing.pipeline import IDCardPreprocessor
from src.utils.config import load_config
from src.utils.logger import get_logger

from .schemas import (
    Base64ImageRequest,
    HealthResponse,
    IDCardResponse,
    PreprocessResponse,
    ValidationResultResponse,
)

logger = get_logger(__name__)

app = FastAPI(
    title="ID Card OCR API",
    description="Extract name, father name, and CNIC from photographed ID cards",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

DECODE_FAILURE_DETAIL = "Failed to process ID card"

_ALLOWED_CONTENT_TYPES = {
    "image/png",
    "image/jpeg",
    "image/jpg",
    "image/webp",
    "image/bmp",
    "application/octet-stream",
}


def _get_reader() -> IDCardReader:
    """Build an ID card reader from the current configuration."""
    return IDCardReader(load_config())


def _to_response(result: OCRResult, start_time: float) -> IDCardResponse:
    review = result.review
    return IDCardResponse(
        success=True,
        document_id=str(uuid.uuid4()),
        full_name=result.full_name,
        father_name=result.father_name,
        cnic_number=result.cnic_number,
        dob=result.dob,
        raw_text=result.raw_text,
        confidence=result.confidence,
        low_confidence=review.low_confidence if review else False,
        extraction_method=result.extraction_method,
        warnings=review.warnings if review else [],
        validation=[
            ValidationResultResponse(
                field_name=r.field_name,
                is_valid=r.is_valid,
                message=r.message,
                rule_name=r.rule_name,
            )
            for r in (review.results if review else [])
        ],
        processing_time_ms=(time.time() - start_time) * 1000,
    )


def _read_card(data: str | bytes, use_llm: bool) -> IDCardResponse:
    start_time = time.time()
    try:
        result = _get_reader().read(data, use_llm=use_llm)
    except ImageDecodeError as exc:
        logger.error("Image decode failed: %s", exc)
        raise HTTPException(status_code=422, detail=DECODE_FAILURE_DETAIL) from exc
    except Exception as exc:
        logger.error("Extraction failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return _to_response(result, start_time)


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return system health status."""
    config = load_config()
    return HealthResponse(
        status="healthy",
        version="1.0.0",
        tesseract_available=shutil.which("tesseract") is not None,
        llm_configured=config.extraction.api_key() is not None,
    )


@app.post("/extract", response_model=IDCardResponse)
async def extract_id_card(
    file: Annotated[UploadFile, File(...)],
    use_llm: Annotated[bool, Query()] = True,
) -> IDCardResponse:
    """Extract ID card fields from an uploaded image.

    Args:
        file: Uploaded card image (PNG, JPEG, WebP, or BMP).
        use_llm: Whether to use language-model extraction.

    Returns:
        Extracted fields, raw OCR text, confidence, and review warnings.
    """
    if file.content_type and file.content_type not in _ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type: {file.content_type}",
        )

    content = await file.read()
    return _read_card(content, use_llm)


@app.post("/extract/base64", response_model=IDCardResponse)
async def extract_id_card_base64(request: Base64ImageRequest) -> IDCardResponse:
    """Extract ID card fields from a data URL or base64 camera capture."""
    return _read_card(request.image, request.use_llm)


@app.post("/preprocess", response_model=PreprocessResponse)
async def preprocess_image(request: Base64ImageRequest) -> PreprocessResponse:
    """Return the preprocessed card image as base64 PNG."""
    preprocessor = IDCardPreprocessor(load_config().preprocessing)
    try:
        encoded = preprocessor.preprocess_image_data(request.image)
    except ImageDecodeError as exc:
        raise HTTPException(status_code=422, detail=DECODE_FAILURE_DETAIL) from exc

    return PreprocessResponse(image=encoded)
