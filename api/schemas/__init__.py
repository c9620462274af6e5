"""Pydantic schemas for API request/response models."""

from api.schemas.responses import SuccessResponse

__all__ = ["SuccessResponse"]
