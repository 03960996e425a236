"""Error taxonomy shared by the domain and service layers.

Domain functions raise these; services convert them into
:class:`~micropress.services.result.ServiceError` payloads carrying the
same ``code`` so nothing crosses a stage boundary as an exception.
"""

from __future__ import annotations


class MicropubError(ValueError):
    """Base class for recognized Micropub failures."""

    code: str = "MICROPUB_ERROR"


class UnauthorizedError(MicropubError):
    """No usable access token was supplied."""

    code = "UNAUTHORIZED"


class TokenConflictError(MicropubError):
    """An access token was supplied in both the header and the body."""

    code = "TOKEN_CONFLICT"


class InvalidRequestError(MicropubError):
    """A required field is missing or a request body has the wrong shape."""

    code = "INVALID_REQUEST"


class NotFoundError(MicropubError):
    """An unknown query type or an unresolvable document path."""

    code = "NOT_FOUND"


class MalformedDocumentError(MicropubError):
    """A stored document has no frontmatter block or it cannot be parsed."""

    code = "MALFORMED_DOCUMENT"
