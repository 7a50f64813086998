"""
Models module containing Pydantic schemas.
"""

from .schemas import (
    PizzaCreate,
    PizzaUpdate,
    Pizza,
    CommentCreate,
    Comment,
    ReplyCreate,
    Reply,
    HealthResponse,
    ErrorResponse
)

__all__ = [
    "PizzaCreate",
    "PizzaUpdate",
    "Pizza",
    "CommentCreate",
    "Comment",
    "ReplyCreate",
    "Reply",
    "HealthResponse",
    "ErrorResponse"
]
