"""
Review domain errors.

Each error carries the HTTP status the transport layer answers with.
"""

from typing import Any, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError


ModelT = TypeVar("ModelT", bound=BaseModel)


class ReviewError(Exception):
    """Base class for errors surfaced to API callers."""
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ReviewError):
    """Required fields missing or malformed."""
    status_code = 400


class ConflictError(ReviewError):
    """Author already reviewed the item, or the id is taken."""
    status_code = 400


class NotFoundError(ReviewError):
    status_code = 404


class ForbiddenError(ReviewError):
    """Caller does not own the review."""
    status_code = 403


class MissingParameterError(ReviewError):
    """Required query parameter absent."""
    status_code = 400


class UploadTooLargeError(ValidationError):
    status_code = 413


def parse_payload(model: Type[ModelT], data: Any) -> ModelT:
    """
    Validate a raw payload into its typed input model.

    Args:
        model: Pydantic model class to validate against
        data: Mapping, model instance or None

    Returns:
        Validated model instance

    Raises:
        ValidationError: If required fields are missing or invalid
    """
    if isinstance(data, model):
        return data
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationError("Payload must be a JSON object")

    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        fields = sorted({
            ".".join(str(part) for part in error["loc"]) or "body"
            for error in e.errors()
        })
        raise ValidationError(f"Missing or invalid fields: {', '.join(fields)}") from e

