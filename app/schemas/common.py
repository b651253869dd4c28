from typing import Generic, TypeVar, List
from pydantic import BaseModel

T = TypeVar("T")


class Pagination(BaseModel):
    """Pagination over root messages"""
    total: int
    page: int
    limit: int
    total_pages: int


class PagedResponse(BaseModel, Generic[T]):
    """Paginated list response"""
    data: List[T]
    pagination: Pagination


class ErrorBody(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    error: ErrorBody
