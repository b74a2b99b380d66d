"""Response envelopes shared by every endpoint."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope: ``{"success": true, "data": ..., "message": ...}``.

    Errors use the shape produced by the global exception handlers instead.
    """

    success: bool = True
    data: T
    message: str | None = Field(
        default=None,
        description="Optional human-readable outcome, suitable for a toast.",
    )


class PaginationMeta(BaseModel):
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=0)


class Paginated(BaseModel, Generic[T]):
    items: list[T]
    meta: PaginationMeta
