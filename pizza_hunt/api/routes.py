"""
API Routes - FastAPI endpoints for pizzas, comments and replies.

- /api/pizzas: list, batch-create, read, update and delete pizzas
- /api/comments: comment on a pizza, reply to a comment, remove either
- /health: document store reachability

POST /api/pizzas accepts a single pizza or an array of pizzas. Offline
clients rely on the array form to resubmit everything they queued in
one request.
"""

import logging
from typing import Any, Union
from fastapi import APIRouter, Depends, HTTPException, Request, status

from ..core.config import settings
from ..core.utils import get_timestamp
from ..models.schemas import (
    PizzaCreate,
    PizzaUpdate,
    Pizza,
    CommentCreate,
    Comment,
    ReplyCreate,
    HealthResponse,
    ErrorResponse
)
from ..storage.documents import DocumentStore

# Configure logging
logger = logging.getLogger(__name__)

PIZZA_NOT_FOUND = "No pizza found with this id!"
COMMENT_NOT_FOUND = "No comment with this id!"

pizza_router = APIRouter(prefix="/api/pizzas")
comment_router = APIRouter(prefix="/api/comments")
router = APIRouter()

NOT_FOUND_RESPONSE = {404: {"model": ErrorResponse, "description": "Not found"}}


def get_store(request: Request) -> DocumentStore:
    """Return the document store the application was started with."""
    return request.app.state.store


def _not_found(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=message)


# ============================================================
# Pizza Endpoints
# ============================================================

@pizza_router.get(
    "",
    response_model=list[Pizza],
    summary="List pizzas",
    description="All pizzas, newest first, with their comments."
)
async def get_all_pizza(store: DocumentStore = Depends(get_store)) -> list[dict[str, Any]]:
    return await store.list_pizzas()


@pizza_router.post(
    "",
    response_model=Union[list[Pizza], Pizza],
    summary="Create one or many pizzas",
    description="""
    Create a pizza, or several at once by sending an array.

    The response has the same shape as the request: an object for an
    object, an array for an array. Offline clients send everything they
    queued while disconnected as one array.
    """,
    responses={
        422: {"model": ErrorResponse, "description": "Validation failed"},
        503: {"model": ErrorResponse, "description": "Document store unavailable"}
    }
)
async def create_pizza(
    payload: Union[list[PizzaCreate], PizzaCreate],
    store: DocumentStore = Depends(get_store)
) -> Union[list[dict[str, Any]], dict[str, Any]]:
    if isinstance(payload, list):
        logger.info(f"Received batch of {len(payload)} pizza(s)")
        return await store.create_pizzas([p.model_dump() for p in payload])

    created = await store.create_pizzas([payload.model_dump()])
    return created[0]


@pizza_router.get(
    "/{pizza_id}",
    response_model=Pizza,
    summary="Get a pizza",
    responses=NOT_FOUND_RESPONSE
)
async def get_pizza_by_id(
    pizza_id: str,
    store: DocumentStore = Depends(get_store)
) -> dict[str, Any]:
    pizza = await store.get_pizza(pizza_id)
    if pizza is None:
        raise _not_found(PIZZA_NOT_FOUND)
    return pizza


@pizza_router.put(
    "/{pizza_id}",
    response_model=Pizza,
    summary="Update a pizza",
    description="Merge the given fields into the pizza and return the new version.",
    responses=NOT_FOUND_RESPONSE
)
async def update_pizza(
    pizza_id: str,
    changes: PizzaUpdate,
    store: DocumentStore = Depends(get_store)
) -> dict[str, Any]:
    pizza = await store.update_pizza(pizza_id, changes.model_dump(exclude_unset=True))
    if pizza is None:
        raise _not_found(PIZZA_NOT_FOUND)
    return pizza


@pizza_router.delete(
    "/{pizza_id}",
    response_model=Pizza,
    summary="Delete a pizza",
    responses=NOT_FOUND_RESPONSE
)
async def delete_pizza(
    pizza_id: str,
    store: DocumentStore = Depends(get_store)
) -> dict[str, Any]:
    pizza = await store.delete_pizza(pizza_id)
    if pizza is None:
        raise _not_found(PIZZA_NOT_FOUND)
    return pizza


# ============================================================
# Comment Endpoints
# ============================================================

@comment_router.post(
    "/{pizza_id}",
    response_model=Pizza,
    summary="Comment on a pizza",
    responses=NOT_FOUND_RESPONSE
)
async def add_comment(
    pizza_id: str,
    payload: CommentCreate,
    store: DocumentStore = Depends(get_store)
) -> dict[str, Any]:
    pizza = await store.add_comment(pizza_id, payload.model_dump())
    if pizza is None:
        raise _not_found(PIZZA_NOT_FOUND)
    return pizza


@comment_router.put(
    "/{pizza_id}/{comment_id}",
    response_model=Comment,
    summary="Reply to a comment",
    responses=NOT_FOUND_RESPONSE
)
async def add_reply(
    pizza_id: str,
    comment_id: str,
    payload: ReplyCreate,
    store: DocumentStore = Depends(get_store)
) -> dict[str, Any]:
    comment = await store.add_reply(comment_id, payload.model_dump())
    if comment is None:
        raise _not_found(COMMENT_NOT_FOUND)
    return comment


@comment_router.delete(
    "/{pizza_id}/{comment_id}",
    response_model=Pizza,
    summary="Remove a comment",
    responses=NOT_FOUND_RESPONSE
)
async def remove_comment(
    pizza_id: str,
    comment_id: str,
    store: DocumentStore = Depends(get_store)
) -> dict[str, Any]:
    if await store.delete_comment(comment_id) is None:
        raise _not_found(COMMENT_NOT_FOUND)

    pizza = await store.pull_comment(pizza_id, comment_id)
    if pizza is None:
        raise _not_found(PIZZA_NOT_FOUND)
    return pizza


@comment_router.delete(
    "/{pizza_id}/{comment_id}/{reply_id}",
    response_model=Comment,
    summary="Remove a reply",
    responses=NOT_FOUND_RESPONSE
)
async def remove_reply(
    pizza_id: str,
    comment_id: str,
    reply_id: str,
    store: DocumentStore = Depends(get_store)
) -> dict[str, Any]:
    comment = await store.remove_reply(comment_id, reply_id)
    if comment is None:
        raise _not_found(COMMENT_NOT_FOUND)
    return comment


# ============================================================
# Utility Endpoints
# ============================================================

@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check the health of the API and its document store."
)
async def health_check(store: DocumentStore = Depends(get_store)) -> HealthResponse:
    store_healthy = await store.health_check()

    return HealthResponse(
        status="healthy" if store_healthy else "degraded",
        service="pizza-hunt-api",
        version=settings.api_version,
        store_connected=store_healthy,
        timestamp=get_timestamp()
    )
