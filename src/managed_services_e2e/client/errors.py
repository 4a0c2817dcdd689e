"""Classified control plane errors.

``ResourceNotFound`` and ``ResourceConflict`` are the two classifications the
lifecycle layer relies on; the REST and Kafka admin clients raise subclasses
of them so callers never inspect status codes or broker error codes.
"""

from __future__ import annotations

from typing import Any

import httpx

# Statuses worth another attempt at the transport layer.
TRANSIENT_STATUS_CODES = frozenset({502, 503, 504})


class ResourceNotFound(Exception):
    """No resource exists for the given identifier."""


class ResourceConflict(Exception):
    """A resource with the requested name already exists."""


class ApiError(Exception):
    """Raised when a control plane API call returns a non-2xx response."""

    def __init__(
        self, status_code: int, body: Any, *, method: str = "", url: str = ""
    ) -> None:
        self.status_code = status_code
        self.body = body
        self.method = method
        self.url = url
        super().__init__(f"{method} {url}: {status_code} {body}".strip())


class ApiNotFoundError(ApiError, ResourceNotFound):
    """404 from the REST API."""


class ApiConflictError(ApiError, ResourceConflict):
    """409 from the REST API."""


class ApiGenericError(ApiError):
    """Any other non-2xx response."""


class KafkaAdminError(Exception):
    """Raised when a Kafka admin operation fails."""


class TopicNotFoundError(KafkaAdminError, ResourceNotFound):
    pass


class TopicExistsError(KafkaAdminError, ResourceConflict):
    pass


def _body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def raise_for_api_status(response: httpx.Response) -> None:
    """Raise the classified ApiError for a non-2xx *response*."""
    if response.is_success:
        return
    method = response.request.method
    url = str(response.request.url)
    body = _body(response)
    if response.status_code == 404:
        raise ApiNotFoundError(response.status_code, body, method=method, url=url)
    if response.status_code == 409:
        raise ApiConflictError(response.status_code, body, method=method, url=url)
    raise ApiGenericError(response.status_code, body, method=method, url=url)


def is_transient(exc: BaseException) -> bool:
    """True for failures that may succeed when the same request is repeated."""
    if isinstance(exc, httpx.TransportError):
        return True
    return isinstance(exc, ApiGenericError) and exc.status_code in TRANSIENT_STATUS_CODES
