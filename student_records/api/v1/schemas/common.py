from pydantic import BaseModel


class PaginationMeta(BaseModel):
    total: int
    page: int
    limit: int
    totalPages: int


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    success: bool = False
    error: str


class NotFoundResponse(BaseModel):
    success: bool = False
    message: str
