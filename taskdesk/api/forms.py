"""
Helpers for endpoints that accept multipart/form-data.
"""
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError


def form_model(model: type[BaseModel], **values) -> BaseModel:
    """Build a schema from submitted form fields; unsubmitted (None) fields stay unset."""
    try:
        return model(**{k: v for k, v in values.items() if v is not None})
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False, include_context=False))
