"""Pydantic schemas for request/response validation."""

from inkwell.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from inkwell.schemas.common import APIResponse, ErrorResponse, PaginationMeta

__all__ = [
    "APIResponse",
    "ErrorResponse",
    "LoginRequest",
    "PaginationMeta",
    "RegisterRequest",
    "TokenResponse",
]
