"""
Shareable URLs Backend - Custom Exception Hierarchy
====================================================

What:  Application-specific exceptions for every failure a request can hit.
How:   Each exception class carries a client-facing message and an optional
       context dict. Global exception handlers (registered in main.py) catch
       these and return JSON error bodies with the matching HTTP status code.
Who:   Raised by services, validation and the record store; caught by global handlers.

Exception Hierarchy:
    ShareableURLError (base)
    ├── BadRequestBody           → 400 body is not a JSON object
    ├── InvalidIdentifier        → 400 key / urlKeys fail UUID validation
    ├── DuplicateContent         → 400 contentHash already indexed
    ├── NotFoundError            → 404 no record under the key
    ├── MethodNotAllowedError    → 405 verb not supported on the path
    └── StoreError               → 500 the key-value backend failed

The `message` of the 4xx errors is returned verbatim as the `error` field,
so existing clients can match on it.
"""

from typing import Any, Dict, Optional


class ShareableURLError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (returned in the API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred.",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class BadRequestBody(ShareableURLError):
    """Raised when the request body cannot be decoded into a JSON object."""

    def __init__(
        self,
        message: str = "Provide a valid JSON body.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidIdentifier(ShareableURLError):
    """
    Raised when a record key (or a batch of keys) is not a valid UUID.

    The message differs per endpoint:
        POST /          → "Provide a valid uuid v4 key."
        POST /metadata  → "Provide an array with valid UUID link keys."
    """

    def __init__(
        self,
        message: str = "Provide a valid uuid v4 key.",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class DuplicateContent(ShareableURLError):
    """
    Raised when a creation request carries a contentHash that is already indexed.

    HTTP:    400 Bad Request

    Example response:
        {
            "error": "Document exists.",
            "existing-document": "d9208390-216d-4304-b00d-9b4a913ea087"
        }

    `existing_document` is the raw value found under the checksum index,
    i.e. the key of the record that first claimed the hash.
    """

    def __init__(
        self,
        existing_document: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["existing_document"] = existing_document
        super().__init__(message="Document exists.", context=ctx)
        self.existing_document = existing_document


class NotFoundError(ShareableURLError):
    """Raised when no record is stored under the requested key."""

    def __init__(
        self,
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message="Document not found.", context=ctx)


class MethodNotAllowedError(ShareableURLError):
    """Raised when the HTTP verb has no branch for the requested path."""

    def __init__(
        self,
        method: Optional[str] = None,
        path: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if method:
            ctx["method"] = method
        if path:
            ctx["path"] = path
        super().__init__(message="Method not allowed.", context=ctx)


class StoreError(ShareableURLError):
    """
    Raised when the key-value backend fails or returns unreadable data.

    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic.
        Driver errors and the affected store key are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A storage error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
