"""Pydantic request/response schemas for the FastAPI endpoints."""

from pydantic import BaseModel


class Base64ImageRequest(BaseModel):
    """Request body carrying a data URL or bare base64 image."""

    image: str
    use_llm: bool = True


class ValidationResultResponse(BaseModel):
    """Response schema for a review check result."""

    field_name: str
    is_valid: bool
    message: str
    rule_name: str


class IDCardResponse(BaseModel):
    """Response schema for an ID card extraction request."""

    success: bool
    document_id: str
    full_name: str | None = None
    father_name: str | None = None
    cnic_number: str | None = None
    dob: str | None = None
    raw_text: str
    confidence: float | None = None
    low_confidence: bool = False
    extraction_method: str
    warnings: list[str] = []
    validation: list[ValidationResultResponse] = []
    processing_time_ms: float


class PreprocessResponse(BaseModel):
    """Response schema for the preprocessing endpoint."""

    image: str


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    tesseract_available: bool
    llm_configured: bool
