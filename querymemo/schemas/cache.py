"""Query cache administration schemas."""

from pydantic import BaseModel, Field


class CacheClearResponse(BaseModel):
    """Response for DELETE /cache."""

    cleared: bool = Field(..., description="True if the query cache namespace was cleared")
