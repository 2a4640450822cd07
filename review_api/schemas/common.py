"""
Common schemas.
"""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response."""
    ok: bool = True


class ErrorResponse(BaseModel):
    """Error response."""
    detail: str


class SuccessResponse(BaseModel):
    """Acknowledgement for operations without a body."""
    success: bool = True
