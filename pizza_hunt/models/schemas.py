"""
Pydantic models for request/response validation.

Defines the data contracts for the API. Field names follow the JSON the
browser client sends and receives (camelCase, `_id` for identifiers).
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Optional


# ============================================================
# Request Models
# ============================================================

class PizzaCreate(BaseModel):
    """
    The payload for creating a new pizza.

    This is also the shape of every record the offline queue holds
    while the client is disconnected.

    Attributes:
        pizzaName: Name of the pizza
        createdBy: Who came up with it
        size: Pizza size, "Large" when omitted
        toppings: List of topping names

    No field is required; the server stores whatever the form collected.
    """
    pizzaName: Optional[str] = Field(
        default=None,
        max_length=200,
        description="Name of the pizza",
        examples=["Zesty"]
    )
    createdBy: Optional[str] = Field(
        default=None,
        max_length=200,
        description="Name of the pizza's creator"
    )
    size: str = Field(
        default="Large",
        description="Pizza size"
    )
    toppings: list[str] = Field(
        default_factory=list,
        description="Topping names"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "pizzaName": "Zesty",
                "createdBy": "Lernantino",
                "size": "Large",
                "toppings": ["Pepperoni", "Jalapeno"]
            }
        }


class PizzaUpdate(BaseModel):
    """Fields that may be changed on an existing pizza."""
    pizzaName: Optional[str] = Field(default=None, max_length=200)
    createdBy: Optional[str] = Field(default=None, max_length=200)
    size: Optional[str] = None
    toppings: Optional[list[str]] = None


class ReplyCreate(BaseModel):
    """The payload for replying to a comment."""
    replyBody: Optional[str] = Field(default=None, max_length=2000)
    writtenBy: Optional[str] = Field(default=None, max_length=200)


class CommentCreate(BaseModel):
    """The payload for commenting on a pizza."""
    commentBody: Optional[str] = Field(default=None, max_length=2000)
    writtenBy: Optional[str] = Field(default=None, max_length=200)


# ============================================================
# Response Models
# ============================================================

class Reply(BaseModel):
    """A reply embedded in a comment."""
    replyId: str
    replyBody: Optional[str] = None
    writtenBy: Optional[str] = None
    createdAt: str


class Comment(BaseModel):
    """A comment on a pizza, with its replies."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    commentBody: Optional[str] = None
    writtenBy: Optional[str] = None
    createdAt: str
    replies: list[Reply] = Field(default_factory=list)
    replyCount: int = 0


class Pizza(BaseModel):
    """
    A stored pizza as returned by the API.

    Comments are populated from their own documents when a pizza is read.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    pizzaName: Optional[str] = None
    createdBy: Optional[str] = None
    createdAt: str
    size: str = "Large"
    toppings: list[str] = Field(default_factory=list)
    comments: list[Comment] = Field(default_factory=list)
    commentCount: int = 0


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    service: str = "pizza-hunt-api"
    version: str
    store_connected: bool
    timestamp: str


class ErrorResponse(BaseModel):
    """
    Generic error response.

    Every error body carries `message`; offline clients treat its presence
    as a failed submission.
    """
    message: str
    detail: Optional[Any] = None
    timestamp: Optional[str] = None
