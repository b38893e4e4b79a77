"""
Shareable URLs Backend - Shareable URL Route Handlers
======================================================

What:  Dispatches (path, method) pairs to record operations.
How:   Three catch-all routes, one per path shape, each accepting every HTTP
       method and branching on request.method. Unsupported verbs raise
       MethodNotAllowedError instead of relying on the framework's 405, so
       the error body matches the rest of the API.
Who:   Called by any client holding a record key.

Dispatch Table:
    /            GET → 405 | POST → create (201) | other → 200 {}
    /metadata    OPTIONS → 200 {} | POST → batch metadata (200) | other → 405
    /<key>       OPTIONS → 200 {} | missing record → 404
                 PUT → update (202) | GET → view (200) | other → 405

Route registration order matters: /metadata must be matched before the
/{key:path} catch-all, and the health router is included before this one.
"""

import json
import math
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from shareable_urls.exceptions import (
    BadRequestBody,
    MethodNotAllowedError,
    NotFoundError,
)
from shareable_urls.schemas.shareable_url import (
    CreatedResponse,
    ErrorResponse,
    MetadataResponse,
)
from shareable_urls.services.shareable_url_service import ShareableURLService
from shareable_urls.store import RecordStore, get_record_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Shareable URLs"])

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def get_shareable_url_service(
    store: RecordStore = Depends(get_record_store),
) -> ShareableURLService:
    """FastAPI dependency building the service over the app's record store."""
    return ShareableURLService(store=store)


def _reject_constant(token: str) -> Any:
    raise ValueError(f"{token} is not valid JSON")


def _parse_finite_float(literal: str) -> float:
    value = float(literal)
    if math.isinf(value):
        raise ValueError(f"{literal} overflows a float")
    return value


async def read_json_body(request: Request) -> Dict[str, Any]:
    """
    Decode the request body as a JSON object.

    NaN and Infinity tokens and number literals that overflow to infinity
    are rejected, since responses are rendered with allow_nan=False.

    Raises:
        BadRequestBody: body is empty, not JSON, not UTF-8, or not an object
    """
    raw = await request.body()
    try:
        body = json.loads(
            raw,
            parse_constant=_reject_constant,
            parse_float=_parse_finite_float,
        )
    except ValueError:
        # json.JSONDecodeError and UnicodeDecodeError are both ValueErrors
        raise BadRequestBody()
    if not isinstance(body, dict):
        raise BadRequestBody()
    return body


@router.api_route(
    "/",
    methods=ALL_METHODS,
    responses={
        201: {"description": "Record created", "model": CreatedResponse},
        400: {"description": "Bad JSON, invalid key or duplicate content", "model": ErrorResponse},
        405: {"description": "GET is not allowed", "model": ErrorResponse},
    },
    summary="Create a shareable URL record",
    description=(
        "POST creates a record under a caller-supplied UUID key. A contentHash "
        "already claimed by another record is rejected with the owning key."
    ),
)
async def collection(
    request: Request,
    service: ShareableURLService = Depends(get_shareable_url_service),
) -> JSONResponse:
    if request.method == "GET":
        raise MethodNotAllowedError(method=request.method, path="/")

    if request.method == "POST":
        body = await read_json_body(request)
        await service.create(body)
        return JSONResponse(status_code=201, content={"created": True})

    # No branch for the remaining verbs
    return JSONResponse(status_code=200, content={})


@router.api_route(
    "/metadata",
    methods=ALL_METHODS,
    responses={
        200: {"description": "Metadata for existing records", "model": MetadataResponse},
        400: {"description": "Bad JSON or invalid urlKeys", "model": ErrorResponse},
        405: {"description": "Method not allowed", "model": ErrorResponse},
    },
    summary="Fetch metadata for several records",
    description=(
        "POST {urlKeys: [uuid, ...]} returns key, contentHash, dateCreation, "
        "dateModification and viewCount for each existing record, in request order. "
        "Unknown keys are skipped."
    ),
)
async def metadata(
    request: Request,
    service: ShareableURLService = Depends(get_shareable_url_service),
) -> JSONResponse:
    if request.method == "OPTIONS":
        return JSONResponse(status_code=200, content={})

    if request.method == "POST":
        body = await read_json_body(request)
        url_keys = await service.get_metadata(body.get("urlKeys"))
        return JSONResponse(status_code=200, content={"urlKeys": url_keys})

    raise MethodNotAllowedError(method=request.method, path="/metadata")


@router.api_route(
    "/{key:path}",
    methods=ALL_METHODS,
    responses={
        200: {"description": "Record with the incremented view count"},
        202: {"description": "Update accepted; body is the record before the update"},
        400: {"description": "Bad JSON body", "model": ErrorResponse},
        404: {"description": "Record not found", "model": ErrorResponse},
        405: {"description": "Method not allowed", "model": ErrorResponse},
    },
    summary="Read or update a single record",
    description=(
        "GET returns the record and counts one view (the first view reports 0). "
        "PUT merges the JSON body into the record and returns the pre-update record."
    ),
)
async def item(
    key: str,
    request: Request,
    service: ShareableURLService = Depends(get_shareable_url_service),
) -> JSONResponse:
    document = await service.get_shareable_url(key)

    if request.method == "OPTIONS":
        return JSONResponse(status_code=200, content={})

    if document is None:
        raise NotFoundError(resource_id=key)

    if request.method == "PUT":
        body = await read_json_body(request)
        previous = await service.update(key, body)
        return JSONResponse(status_code=202, content=previous)

    if request.method == "GET":
        viewed = await service.record_view(key, document)
        return JSONResponse(status_code=200, content=viewed)

    raise MethodNotAllowedError(method=request.method, path=f"/{key}")
