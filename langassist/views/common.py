"""Common response schemas."""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    error: str


class StatusResponse(BaseModel):
    status: str
    message: str
