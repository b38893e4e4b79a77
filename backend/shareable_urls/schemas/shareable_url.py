"""
Shareable URLs Backend - Pydantic Request/Response Schemas
===========================================================

What:  Pydantic models for the parts of the API contract with a fixed shape.
How:   Records themselves are open-ended JSON objects (arbitrary payload fields),
       so they travel as plain dicts; only the metadata projection, the
       success/error envelopes and the health report are modelled here.
Who:   Used by the service for the metadata projection and by routes for
       OpenAPI documentation.

Field names are camelCase because they are the wire names existing clients use.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field


class ShareableURLMetadata(BaseModel):
    """
    What:  Projection of a record returned by POST /metadata.
    How:   Built from the stored record with model_validate(); every payload
           field outside this set is dropped. Dumped with exclude_unset so
           fields the record never had (e.g. dateModification before the first
           update) are omitted rather than sent as null.
    """
    key: str = Field(description="Record key (UUID)")
    contentHash: Any = Field(default=None, description="Caller-supplied content fingerprint")
    dateCreation: Optional[str] = Field(default=None, description="ISO 8601 creation time")
    dateModification: Optional[str] = Field(
        default=None,
        description="ISO 8601 time of the last update (absent until first update)"
    )
    viewCount: int = Field(default=0, description="Current view counter")

    model_config = {"extra": "ignore"}


class MetadataResponse(BaseModel):
    """Response of POST /metadata, in the same order as the requested keys."""
    urlKeys: List[ShareableURLMetadata] = Field(description="Projections of existing records")


class CreatedResponse(BaseModel):
    """Response of a successful POST /."""
    created: bool = Field(default=True)


class ErrorResponse(BaseModel):
    """
    What:  Error body shared by every failure response.
    Note:  Duplicate-content errors add an `existing-document` field holding the
           key of the record that owns the content hash.
    """
    error: str = Field(description="Human-readable error message")


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and store status.
    Who:   Returned by GET /health for monitoring and load balancer health checks.
    """
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    store: str = Field(description="Record store backend and reachability, e.g. database:connected")
    uptime_seconds: float = Field(description="Seconds since service started")
