"""Query API: runs the configured executor for free-form query text.

Caching is transparent here: QueryCacheMiddleware answers repeated queries
before these routes run and stores their successful responses.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query

from querymemo.api.v1.dependencies import get_query_executor, get_requester_scope
from querymemo.application.interfaces import QueryExecutor
from querymemo.domain.exceptions import ValidationException
from querymemo.schemas.query import QueryRequest, QueryResponse
from querymemo.shared.telemetry.tracing import traced

router = APIRouter()


@traced("query.execute")
async def _execute(executor: QueryExecutor, query_text: str, scope: str) -> Any:
    return await executor.execute(query_text, scope)


async def _run(executor: QueryExecutor, query_text: str | None, scope: str) -> QueryResponse:
    if not query_text or not query_text.strip():
        raise ValidationException("Query text is required", field="message")
    result = await _execute(executor, query_text, scope=scope)
    return QueryResponse(data=result)


@router.get("", response_model=QueryResponse)
async def run_query(
    executor: Annotated[QueryExecutor, Depends(get_query_executor)],
    scope: Annotated[str, Depends(get_requester_scope)],
    q: Annotated[str | None, Query(description="Query text")] = None,
) -> QueryResponse:
    """Run query text from the q parameter."""
    return await _run(executor, q, scope)


@router.post("", response_model=QueryResponse)
async def submit_query(
    body: QueryRequest,
    executor: Annotated[QueryExecutor, Depends(get_query_executor)],
    scope: Annotated[str, Depends(get_requester_scope)],
) -> QueryResponse:
    """Run query text from the body (message, then query)."""
    return await _run(executor, body.query_text(), scope)
